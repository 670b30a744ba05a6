"""
Syntax tree to code definition conversion.

The converter only reads the generic tree surface (root, children, node
type, name, location and node text), so it works for any language whose
declaration node types are described by DefinitionRules.
"""

import logging
import uuid
from typing import AbstractSet, Callable, Iterable, List, Optional

from polyast.converters.rules import DefinitionRules, get_rules
from polyast.models.definitions import (
    ClassDefinition,
    CompilationUnitDefinition,
    FieldDefinition,
    InterfaceDefinition,
    MethodDefinition,
    NamespaceDefinition,
    ParameterDefinition,
    PropertyDefinition,
)
from polyast.tree.ast_node import AstNode
from polyast.tree.syntax_tree import SyntaxTree

logger = logging.getLogger(__name__)

_DECLARATION_SUFFIXES = ("_declaration", "_definition", "_directive", "_statement", "_signature")
_IDENTIFIER_SUFFIX = "identifier"


class DefinitionConverter:
    """Converts syntax trees into CompilationUnitDefinition models."""

    def __init__(self, language: str, rules: Optional[DefinitionRules] = None):
        """
        Initialize the converter.

        Args:
            language: Language of the trees to convert
            rules: Node-type rules; defaults to the built-in rules for the
                language, or substring matching when there are none
        """
        if not language:
            raise ValueError("language is required")

        self._language = language
        self._rules = rules if rules is not None else get_rules(language)
        if self._rules is None:
            logger.debug(f"No definition rules for '{language}', using node type heuristics")

    @property
    def language(self) -> str:
        return self._language

    def convert_compilation_unit(self, tree: SyntaxTree) -> CompilationUnitDefinition:
        """
        Convert a whole syntax tree.

        Args:
            tree: Parsed syntax tree

        Returns:
            CompilationUnitDefinition named after the tree's file path
        """
        if tree is None:
            raise ValueError("tree is required")

        root = tree.root
        # declarations after a file-scoped namespace belong to that namespace
        claimed = {
            member.id
            for namespace in self._collect(root, self._is_namespace)
            for member in self._file_scoped_members(namespace)
        }
        return CompilationUnitDefinition(
            name=tree.file_path,
            language=self._language,
            location=root.location,
            imports=self._extract_imports(tree),
            namespaces=[
                self.convert_namespace(tree, node)
                for node in self._collect(root, self._is_namespace, claimed)
            ],
            classes=[
                self.convert_class(tree, node)
                for node in self._collect(root, self._is_class, claimed)
            ],
            interfaces=[
                self.convert_interface(tree, node)
                for node in self._collect(root, self._is_interface, claimed)
            ],
            functions=[
                self.convert_method(tree, node)
                for node in self._collect(root, self._is_function, claimed)
            ],
        )

    def convert_namespace(self, tree: SyntaxTree, node: AstNode) -> NamespaceDefinition:
        contents = list(node.children) + self._file_scoped_members(node)
        return NamespaceDefinition(
            name=self._resolve_name(tree, node) or "UnknownNamespace",
            location=node.location,
            classes=[
                self.convert_class(tree, n) for n in self._collect_from(contents, self._is_class)
            ],
            interfaces=[
                self.convert_interface(tree, n)
                for n in self._collect_from(contents, self._is_interface)
            ],
            namespaces=[
                self.convert_namespace(tree, n)
                for n in self._collect_from(contents, self._is_namespace)
            ],
        )

    def convert_class(self, tree: SyntaxTree, node: AstNode) -> ClassDefinition:
        members = self._collect(node, self._is_member)
        return ClassDefinition(
            name=self._resolve_name(tree, node) or "UnknownClass",
            kind=node.node_type,
            location=node.location,
            methods=[
                self.convert_method(tree, m)
                for m in members
                if self._is_method(m) or self._is_function(m)
            ],
            properties=[self._convert_property(tree, m) for m in members if self._is_property(m)],
            fields=[self._convert_field(tree, m) for m in members if self._is_field(m)],
            classes=[self.convert_class(tree, m) for m in members if self._is_class(m)],
            interfaces=[self.convert_interface(tree, m) for m in members if self._is_interface(m)],
        )

    def convert_interface(self, tree: SyntaxTree, node: AstNode) -> InterfaceDefinition:
        members = self._collect(node, self._is_member)
        return InterfaceDefinition(
            name=self._resolve_name(tree, node) or "UnknownInterface",
            location=node.location,
            methods=[
                self.convert_method(tree, m)
                for m in members
                if self._is_method(m) or self._is_function(m)
            ],
            properties=[self._convert_property(tree, m) for m in members if self._is_property(m)],
        )

    def convert_method(self, tree: SyntaxTree, node: AstNode) -> MethodDefinition:
        return MethodDefinition(
            name=self._resolve_name(tree, node) or "UnknownMethod",
            location=node.location,
            parameters=self._extract_parameters(tree, node),
            signature=self._extract_signature(tree, node),
        )

    def _convert_property(self, tree: SyntaxTree, node: AstNode) -> PropertyDefinition:
        return PropertyDefinition(
            name=self._resolve_name(tree, node) or "UnknownProperty",
            location=node.location,
        )

    def _convert_field(self, tree: SyntaxTree, node: AstNode) -> FieldDefinition:
        return FieldDefinition(
            name=self._resolve_name(tree, node) or "UnknownField",
            location=node.location,
        )

    def _extract_imports(self, tree: SyntaxTree) -> List[str]:
        imports = []
        for node in self._collect(tree.root, self._is_import):
            text = tree.get_node_text(node) or node.text or ""
            text = text.strip()
            if text:
                imports.append(text)
        return imports

    def _extract_parameters(self, tree: SyntaxTree, node: AstNode) -> List[ParameterDefinition]:
        parameter_list = next(
            (child for child in node.children if self._is_parameter_list(child)),
            None,
        )
        if parameter_list is None:
            return []

        parameters = []
        for child in parameter_list.children:
            if not child.get_metadata("is_named", True) or child.node_type == "comment":
                continue
            parameters.append(
                ParameterDefinition(
                    name=self._resolve_name(tree, child) or tree.get_node_text(child).strip(),
                    location=child.location,
                )
            )
        return parameters

    def _extract_signature(self, tree: SyntaxTree, node: AstNode) -> Optional[str]:
        text = tree.get_node_text(node)
        if not text:
            return None

        body = next((child for child in node.children if self._is_body(child)), None)
        if body is not None and body.location is not None and node.location is not None:
            text = text[: body.location.start_offset - node.location.start_offset]
        return " ".join(text.split()) or None

    def _resolve_name(self, tree: SyntaxTree, node: AstNode) -> Optional[str]:
        """Declared name, else the first named or identifier descendant."""
        if node.name:
            return node.name
        if node.node_type.endswith(_IDENTIFIER_SUFFIX):
            return tree.get_node_text(node) or node.text

        named = next((d for d in node.get_descendants() if d.name), None)
        if named is not None:
            return named.name

        identifier = next(
            (d for d in node.get_descendants() if d.node_type.endswith(_IDENTIFIER_SUFFIX)),
            None,
        )
        if identifier is not None:
            return tree.get_node_text(identifier) or identifier.text
        return None

    def _collect(
        self,
        node: AstNode,
        accept: Callable[[AstNode], bool],
        skip: AbstractSet[uuid.UUID] = frozenset(),
    ) -> List[AstNode]:
        """
        Nearest accepted descendants in document order.

        Matches are not searched further, and neither are other declaration
        scopes, so a nested class is found through its enclosing class only.
        Nodes whose id is in ``skip`` are left out together with their subtrees.
        """
        return self._collect_from(node.children, accept, skip)

    def _collect_from(
        self,
        nodes: Iterable[AstNode],
        accept: Callable[[AstNode], bool],
        skip: AbstractSet[uuid.UUID] = frozenset(),
    ) -> List[AstNode]:
        found: List[AstNode] = []
        stack = list(reversed(list(nodes)))
        while stack:
            current = stack.pop()
            if current.id in skip:
                continue
            if accept(current):
                found.append(current)
                continue
            if self._is_scope(current):
                continue
            stack.extend(reversed(current.children))
        return found

    def _file_scoped_members(self, node: AstNode) -> List[AstNode]:
        """Siblings following a file-scoped namespace; empty for any other node."""
        parent = node.parent
        if parent is None or not self._is_file_scoped_namespace(node):
            return []
        siblings = parent.children
        index = next(i for i, sibling in enumerate(siblings) if sibling is node)
        return list(siblings[index + 1:])

    # Classification

    def _matches(self, node: AstNode, rule_types: str, keyword: str) -> bool:
        if self._rules is not None:
            return node.node_type in getattr(self._rules, rule_types)
        node_type = node.node_type.lower()
        return keyword in node_type and node_type.endswith(_DECLARATION_SUFFIXES)

    def _is_import(self, node: AstNode) -> bool:
        if self._rules is not None:
            return node.node_type in self._rules.import_types
        node_type = node.node_type.lower()
        return ("import" in node_type or "using" in node_type) and node_type.endswith(
            _DECLARATION_SUFFIXES
        )

    def _is_namespace(self, node: AstNode) -> bool:
        return self._matches(node, "namespace_types", "namespace")

    def _is_file_scoped_namespace(self, node: AstNode) -> bool:
        if self._rules is not None:
            return node.node_type in self._rules.file_scoped_namespace_types
        return node.node_type.lower().startswith("file_scoped") and self._is_namespace(node)

    def _is_class(self, node: AstNode) -> bool:
        return self._matches(node, "class_types", "class")

    def _is_interface(self, node: AstNode) -> bool:
        return self._matches(node, "interface_types", "interface")

    def _is_method(self, node: AstNode) -> bool:
        return self._matches(node, "method_types", "method")

    def _is_function(self, node: AstNode) -> bool:
        return self._matches(node, "function_types", "function")

    def _is_property(self, node: AstNode) -> bool:
        return self._matches(node, "property_types", "property")

    def _is_field(self, node: AstNode) -> bool:
        return self._matches(node, "field_types", "field")

    def _is_parameter_list(self, node: AstNode) -> bool:
        if self._rules is not None:
            return node.node_type in self._rules.parameter_list_types
        node_type = node.node_type.lower()
        return node_type.endswith("parameters") or node_type == "parameter_list"

    def _is_body(self, node: AstNode) -> bool:
        if self._rules is not None:
            return node.node_type in self._rules.body_types
        return node.node_type.lower() in ("block", "body", "statement_block")

    def _is_member(self, node: AstNode) -> bool:
        return (
            self._is_method(node)
            or self._is_function(node)
            or self._is_property(node)
            or self._is_field(node)
            or self._is_class(node)
            or self._is_interface(node)
        )

    def _is_scope(self, node: AstNode) -> bool:
        return (
            self._is_namespace(node)
            or self._is_class(node)
            or self._is_interface(node)
            or self._is_method(node)
            or self._is_function(node)
        )
