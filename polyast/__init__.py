"""
Language-agnostic syntax tree core.

Parser adapters (see the ``parsers`` package) turn source text into
SyntaxTree instances built from AstNode objects; this package holds the tree
model, its queries, diagnostics and the definition converter.
"""

from polyast.errors import InvalidStateTransitionError, ParserDisposedError, ParsingError
from polyast.models import (
    CompilationUnitDefinition,
    ErrorSeverity,
    ParseResult,
    SourceLocation,
    SyntaxDiagnostic,
    SyntaxTreeMetrics,
)
from polyast.tree import AstNode, AstVisitor, SyntaxTree

__all__ = [
    "AstNode",
    "AstVisitor",
    "SyntaxTree",
    "SourceLocation",
    "SyntaxDiagnostic",
    "SyntaxTreeMetrics",
    "ErrorSeverity",
    "ParseResult",
    "CompilationUnitDefinition",
    "ParsingError",
    "ParserDisposedError",
    "InvalidStateTransitionError",
]
