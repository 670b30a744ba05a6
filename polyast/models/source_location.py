"""Source location data models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SourceLocation(BaseModel):
    """Half-open [start_offset, end_offset) span in the parsed source text.

    Offsets are 0-based character positions; line and column, when present,
    are 1-based.
    """

    model_config = ConfigDict(frozen=True)

    start_offset: int = Field(..., ge=0, description="Start offset (inclusive)")
    end_offset: int = Field(..., ge=0, description="End offset (exclusive)")
    start_line: Optional[int] = Field(None, ge=1, description="Start line (1-indexed)")
    start_column: Optional[int] = Field(None, ge=1, description="Start column (1-indexed)")
    end_line: Optional[int] = Field(None, ge=1, description="End line (1-indexed)")
    end_column: Optional[int] = Field(None, ge=1, description="End column (1-indexed)")

    @model_validator(mode="after")
    def _check_range(self) -> "SourceLocation":
        if self.end_offset < self.start_offset:
            raise ValueError(
                f"end_offset ({self.end_offset}) must not be before "
                f"start_offset ({self.start_offset})"
            )
        return self

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset

    def contains(self, offset: int) -> bool:
        """Return True if ``offset`` lies inside the span.

        Zero-length spans contain no position.
        """
        return self.start_offset <= offset < self.end_offset
