"""Data models for the polyglot syntax tree core."""

from .definitions import (
    ClassDefinition,
    CompilationUnitDefinition,
    FieldDefinition,
    InterfaceDefinition,
    MethodDefinition,
    NamespaceDefinition,
    ParameterDefinition,
    PropertyDefinition,
)
from .diagnostics import ErrorSeverity, SyntaxDiagnostic, SyntaxTreeMetrics
from .parse_result import ParseResult
from .source_location import SourceLocation

__all__ = [
    # Location models
    "SourceLocation",
    # Diagnostic models
    "ErrorSeverity",
    "SyntaxDiagnostic",
    "SyntaxTreeMetrics",
    # Result models
    "ParseResult",
    # Definition models
    "ParameterDefinition",
    "MethodDefinition",
    "PropertyDefinition",
    "FieldDefinition",
    "InterfaceDefinition",
    "ClassDefinition",
    "NamespaceDefinition",
    "CompilationUnitDefinition",
]
