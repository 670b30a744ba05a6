"""
Concrete tree-sitter adapters for the built-in languages.
"""

from parsers.tree_sitter_parser import TreeSitterLanguageParser


class CSharpParser(TreeSitterLanguageParser):
    """C# adapter using tree-sitter-c-sharp."""

    language_name = "csharp"
    grammar_module = "tree_sitter_c_sharp"


class JavaParser(TreeSitterLanguageParser):
    """Java adapter using tree-sitter-java."""

    language_name = "java"
    grammar_module = "tree_sitter_java"


class TypeScriptParser(TreeSitterLanguageParser):
    language_name = "typescript"
    grammar_module = "tree_sitter_typescript"
    grammar_function = "language_typescript"


class TsxParser(TreeSitterLanguageParser):
    language_name = "tsx"
    grammar_module = "tree_sitter_typescript"
    grammar_function = "language_tsx"


class JavaScriptParser(TreeSitterLanguageParser):
    language_name = "javascript"
    grammar_module = "tree_sitter_javascript"


class PythonParser(TreeSitterLanguageParser):
    language_name = "python"
    grammar_module = "tree_sitter_python"


class JsonParser(TreeSitterLanguageParser):
    language_name = "json"
    grammar_module = "tree_sitter_json"
