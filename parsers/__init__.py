"""
Parser adapters for the syntax tree core.

This package provides the adapter lifecycle base class, the tree-sitter
adapters for the built-in languages, the language registry and the
single-language CodeParser facade.
"""

from parsers.base import LanguageParser, ParserState
from parsers.code_parser import CodeParser
from parsers.manager import LanguageConfig, ParserRegistry
from parsers.tree_sitter_parser import TreeSitterLanguageParser

__all__ = [
    "LanguageParser",
    "ParserState",
    "TreeSitterLanguageParser",
    "LanguageConfig",
    "ParserRegistry",
    "CodeParser",
]
