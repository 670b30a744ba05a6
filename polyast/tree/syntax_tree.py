"""
Read-only, queryable view over a completed parse.

A SyntaxTree owns the root node and the exact source text that produced it.
All offset-based queries are relative to that text, and none of them raise
for out-of-range input: they return None or an empty string instead.
"""

from functools import cached_property
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Tuple, Type

from polyast.models.diagnostics import ErrorSeverity, SyntaxDiagnostic, SyntaxTreeMetrics
from polyast.tree.ast_node import AstNode, NodeT
from polyast.tree.line_index import LineIndex

if TYPE_CHECKING:
    from polyast.converters.definition_converter import DefinitionConverter
    from polyast.models.definitions import CompilationUnitDefinition


class SyntaxTree:
    """Parsed source file: root node, source text and derived diagnostics."""

    def __init__(
        self,
        root: AstNode,
        source_text: str,
        language: str,
        file_path: Optional[str] = None,
    ):
        """
        Wrap a finished node tree.

        The root and all its descendants are frozen, and the error list is
        computed once here.

        Args:
            root: Root node produced by a parser adapter
            source_text: Exact text that was parsed
            language: Language identifier of the grammar used
            file_path: Path of the parsed file, if known

        Raises:
            ValueError: If root, source_text or language is missing
        """
        if root is None:
            raise ValueError("root is required")
        if source_text is None:
            raise ValueError("source_text is required")
        if not language:
            raise ValueError("language is required")

        root.freeze()
        self._root = root
        self._source_text = source_text
        self._language = language
        self._file_path = file_path
        self._errors: Tuple[SyntaxDiagnostic, ...] = tuple(self._extract_errors())

    @property
    def root(self) -> AstNode:
        return self._root

    @property
    def source_text(self) -> str:
        return self._source_text

    @property
    def language(self) -> str:
        return self._language

    @property
    def file_path(self) -> Optional[str]:
        return self._file_path

    @property
    def errors(self) -> Tuple[SyntaxDiagnostic, ...]:
        return self._errors

    @property
    def has_errors(self) -> bool:
        return len(self._errors) > 0

    @cached_property
    def _line_index(self) -> LineIndex:
        return LineIndex(self._source_text)

    # Traversal

    def get_all_nodes(self) -> Iterator[AstNode]:
        """Lazily yield the root followed by all descendants in pre-order."""
        yield self._root
        yield from self._root.get_descendants()

    def get_nodes(self, of_type: Type[NodeT]) -> Iterator[NodeT]:
        """Yield every node that is an instance of ``of_type``."""
        return (node for node in self.get_all_nodes() if isinstance(node, of_type))

    def get_nodes_by_type(self, node_type: str) -> Iterator[AstNode]:
        """Yield every node whose type matches ``node_type`` case-insensitively."""
        wanted = node_type.casefold()
        return (node for node in self.get_all_nodes() if node.node_type.casefold() == wanted)

    # Position queries

    def get_node_at_position(self, offset: int) -> Optional[AstNode]:
        """
        Find the most specific node whose span contains ``offset``.

        Returns None for offsets outside the source text, or when the root
        itself has no location covering the offset.
        """
        if offset < 0 or offset >= len(self._source_text):
            return None

        node = self._root
        if node.location is None or not node.location.contains(offset):
            return None

        while True:
            for child in node.children:
                if child.location is not None and child.location.contains(offset):
                    node = child
                    break
            else:
                return node

    def get_node_at_location(self, line: int, column: int) -> Optional[AstNode]:
        """Find the most specific node at a 1-based line/column pair."""
        if line < 1 or column < 1:
            return None

        offset = self.get_position_from_line_column(line, column)
        if offset is None:
            return None
        return self.get_node_at_position(offset)

    def get_line_column_from_position(self, offset: int) -> Tuple[int, int]:
        """
        Translate an offset into a 1-based ``(line, column)`` pair.

        Offsets outside ``[0, len(source_text)]`` clamp to ``(1, 1)``.
        """
        return self._line_index.line_column(offset)

    def get_position_from_line_column(self, line: int, column: int) -> Optional[int]:
        """Inverse of get_line_column_from_position; None if nothing is there."""
        return self._line_index.offset(line, column)

    def get_node_text(self, node: AstNode) -> str:
        """
        Slice the source text covered by ``node``.

        Returns an empty string when the node has no location or its range
        does not fit the source text.
        """
        if node is None:
            raise ValueError("node is required")

        location = node.location
        if location is None:
            return ""

        start, end = location.start_offset, location.end_offset
        if start >= 0 and end > start and end <= len(self._source_text):
            return self._source_text[start:end]
        return ""

    # Diagnostics and metrics

    def get_metrics(self) -> SyntaxTreeMetrics:
        """Compute a fresh metrics snapshot in a single traversal."""
        total_nodes = 0
        max_depth = 0
        counts: Dict[str, int] = {}
        spellings: Dict[str, str] = {}

        stack: List[Tuple[AstNode, int]] = [(self._root, 0)]
        while stack:
            node, depth = stack.pop()
            total_nodes += 1
            max_depth = max(max_depth, depth)

            folded = node.node_type.casefold()
            key = spellings.setdefault(folded, node.node_type)
            counts[key] = counts.get(key, 0) + 1

            stack.extend((child, depth + 1) for child in reversed(node.children))

        return SyntaxTreeMetrics(
            total_nodes=total_nodes,
            max_depth=max_depth,
            error_count=len(self._errors),
            node_type_counts=counts,
            source_length=len(self._source_text),
            line_count=self._source_text.count("\n") + 1,
        )

    def to_definition(
        self,
        converter: Optional["DefinitionConverter"] = None,
    ) -> "CompilationUnitDefinition":
        """
        Convert the tree into a compilation unit definition.

        Args:
            converter: Converter to use; defaults to one for this tree's language
        """
        if converter is None:
            from polyast.converters.definition_converter import DefinitionConverter

            converter = DefinitionConverter(self._language)
        return converter.convert_compilation_unit(self)

    def _extract_errors(self) -> Iterator[SyntaxDiagnostic]:
        for node in self.get_all_nodes():
            if node.is_error:
                yield SyntaxDiagnostic(
                    message="Syntax error",
                    code=node.node_type,
                    severity=ErrorSeverity.ERROR,
                    location=node.location,
                    file_path=self._file_path,
                )

    def __repr__(self) -> str:
        return (
            f"SyntaxTree(language={self._language!r}, file_path={self._file_path!r}, "
            f"errors={len(self._errors)})"
        )
