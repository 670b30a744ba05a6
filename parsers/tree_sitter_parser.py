"""
Tree-sitter backed parser adapter.

Each supported language ships its grammar as a separate wheel
(``tree_sitter_java``, ``tree_sitter_python``, ...). The grammar module is
imported on first initialization, so a missing grammar only affects the
language that needs it.
"""

import asyncio
import importlib
from typing import List, Optional, Tuple

import tree_sitter

from polyast.config import Settings, settings as default_settings
from polyast.models.source_location import SourceLocation
from polyast.tree.ast_node import AstNode
from polyast.tree.line_index import LineIndex
from polyast.utils.metrics import ParseMetricsCollector
from parsers.base import LanguageParser


class TreeSitterLanguageParser(LanguageParser):
    """
    Parser adapter built on a tree-sitter grammar.

    Subclasses set ``language_name``, ``grammar_module`` and
    ``grammar_function``; everything else is shared.
    """

    language_name: str = ""
    grammar_module: str = ""
    grammar_function: str = "language"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        metrics: Optional[ParseMetricsCollector] = None,
    ):
        super().__init__(self.language_name, metrics=metrics)
        self._settings = settings or default_settings
        self._ts_language: Optional[tree_sitter.Language] = None
        self._parser: Optional[tree_sitter.Parser] = None

    async def _initialize_language(self) -> None:
        self._ts_language, self._parser = await asyncio.to_thread(self._load_grammar)

    def _load_grammar(self) -> Tuple[tree_sitter.Language, tree_sitter.Parser]:
        """
        Import the grammar wheel and build a parser for it.

        Raises:
            ImportError: If the grammar package is not installed
            AttributeError: If the package has no such grammar function
        """
        module = importlib.import_module(self.grammar_module)
        grammar = getattr(module, self.grammar_function)
        ts_language = tree_sitter.Language(grammar())
        return ts_language, tree_sitter.Parser(ts_language)

    async def _parse_source(self, source: str, file_path: Optional[str]) -> AstNode:
        if self._parser is None:
            raise RuntimeError(f"{self.language} parser has no loaded grammar")
        return await asyncio.to_thread(self._build_tree, self._parser, source)

    def _dispose_language(self) -> None:
        self._parser = None
        self._ts_language = None

    def _build_tree(self, parser: tree_sitter.Parser, source: str) -> AstNode:
        """
        Parse ``source`` and convert the tree-sitter tree into AstNodes.

        Tree-sitter reports UTF-8 byte offsets; locations are converted to
        character offsets so they index ``source`` directly.
        """
        encoded = source.encode("utf-8")
        ts_tree = parser.parse(encoded)
        if ts_tree.root_node is None:
            raise ValueError("tree-sitter returned no root node")

        char_offsets = _byte_to_char_offsets(source, encoded)
        line_index = LineIndex(source)

        def to_char(byte_offset: int) -> int:
            if char_offsets is None:
                return byte_offset
            return char_offsets[min(byte_offset, len(char_offsets) - 1)]

        root: Optional[AstNode] = None
        stack: List[Tuple[tree_sitter.Node, Optional[AstNode]]] = [(ts_tree.root_node, None)]

        while stack:
            ts_node, parent = stack.pop()
            node = self._convert_node(ts_node, source, line_index, to_char)

            if parent is None:
                root = node
            else:
                parent.add_child(node)

            for child in reversed(ts_node.children):
                if self._keep(child):
                    stack.append((child, node))

        return root

    def _keep(self, ts_node: tree_sitter.Node) -> bool:
        if ts_node.is_named or ts_node.is_error or ts_node.is_missing:
            return True
        return self._settings.include_anonymous_nodes

    def _convert_node(
        self,
        ts_node: tree_sitter.Node,
        source: str,
        line_index: LineIndex,
        to_char,
    ) -> AstNode:
        start = to_char(ts_node.start_byte)
        end = to_char(ts_node.end_byte)
        start_line, start_column = line_index.line_column(start)
        end_line, end_column = line_index.line_column(end)

        name = None
        name_node = ts_node.child_by_field_name("name")
        if name_node is not None:
            name = source[to_char(name_node.start_byte):to_char(name_node.end_byte)] or None

        node = AstNode(
            node_type=ts_node.type,
            name=name,
            location=SourceLocation(
                start_offset=start,
                end_offset=end,
                start_line=start_line,
                start_column=start_column,
                end_line=end_line,
                end_column=end_column,
            ),
        )

        limit = self._settings.max_node_text_length
        text = source[start:min(end, start + limit + 1)]
        node.set_text(text if len(text) <= limit else text[:limit] + "...")
        node.set_error(ts_node.is_error)
        node.set_missing(ts_node.is_missing)
        node.set_metadata("is_named", ts_node.is_named)
        node.set_metadata("has_error", ts_node.has_error)
        return node


def _byte_to_char_offsets(source: str, encoded: bytes) -> Optional[List[int]]:
    """
    Build a byte offset -> character offset table.

    Returns None for pure ASCII text, where both offsets coincide.
    """
    if len(encoded) == len(source):
        return None

    table: List[int] = []
    for char_index, char in enumerate(source):
        table.extend([char_index] * len(char.encode("utf-8")))
    table.append(len(source))
    return table
