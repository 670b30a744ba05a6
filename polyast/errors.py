"""Exceptions raised by the syntax tree core and its parser adapters."""

from typing import Optional


class ParsingError(Exception):
    """Raised (or carried by a failed ParseResult) when source cannot be parsed."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        language: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.language = language


class ParserDisposedError(RuntimeError):
    """Raised when a disposed parser adapter is used again."""

    def __init__(self, parser_name: str):
        super().__init__(f"Cannot access a disposed parser: {parser_name}")
        self.parser_name = parser_name


class InvalidStateTransitionError(RuntimeError):
    """Raised when a parser lifecycle transition is not allowed."""
    pass
