"""Diagnostic and metric models derived from syntax trees."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from polyast.models.source_location import SourceLocation


class ErrorSeverity(str, Enum):
    """Severity level of a syntax diagnostic."""

    HIDDEN = "hidden"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SyntaxDiagnostic(BaseModel):
    """Diagnostic projected from an error node of a syntax tree."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(..., description="Diagnostic message")
    code: Optional[str] = Field(None, description="Grammar node type that produced the error")
    severity: ErrorSeverity = Field(ErrorSeverity.ERROR, description="Severity level")
    location: Optional[SourceLocation] = Field(None, description="Location of the error node")
    file_path: Optional[str] = Field(None, description="Path of the parsed file")


class SyntaxTreeMetrics(BaseModel):
    """Snapshot of structural metrics for a syntax tree."""

    model_config = ConfigDict(frozen=True)

    total_nodes: int = 0
    max_depth: int = 0
    error_count: int = 0
    node_type_counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Node counts grouped case-insensitively, keyed by first-seen spelling",
    )
    source_length: int = 0
    line_count: int = 0

    def count_for(self, node_type: str) -> int:
        """Case-insensitive lookup into ``node_type_counts``."""
        wanted = node_type.casefold()
        for key, count in self.node_type_counts.items():
            if key.casefold() == wanted:
                return count
        return 0
