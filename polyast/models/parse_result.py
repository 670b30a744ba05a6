"""Result model returned by parsing operations."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from polyast.errors import ParsingError

ValueT = TypeVar("ValueT")


class ParseResult(BaseModel, Generic[ValueT]):
    """Success value or ParsingError, returned instead of raising."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    value: Optional[ValueT] = None
    error: Optional[ParsingError] = None

    @classmethod
    def ok(cls, value: ValueT) -> "ParseResult[ValueT]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: "ParsingError | str") -> "ParseResult[ValueT]":
        if isinstance(error, str):
            error = ParsingError(error)
        return cls(success=False, error=error)

    @property
    def is_failure(self) -> bool:
        return not self.success

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    def unwrap(self) -> ValueT:
        """Return the value or raise the carried ParsingError."""
        if self.error is not None:
            raise self.error
        return self.value
