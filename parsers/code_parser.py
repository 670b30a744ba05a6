"""
Single-language parsing facade.

CodeParser binds a language name to a ParserRegistry and exposes the
parse-related operations as ParseResult values; nothing here raises for bad
input or engine failures.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from polyast.errors import ParsingError
from polyast.models.definitions import CompilationUnitDefinition
from polyast.models.diagnostics import SyntaxDiagnostic
from polyast.models.parse_result import ParseResult
from polyast.tree.syntax_tree import SyntaxTree
from parsers.base import EMPTY_SOURCE_MESSAGE
from parsers.manager import ParserRegistry

logger = logging.getLogger(__name__)


class CodeParser:
    """Parses source text of one language through a ParserRegistry."""

    def __init__(self, language: str, registry: ParserRegistry):
        """
        Args:
            language: Language to parse
            registry: Registry providing the parser adapter

        Raises:
            ValueError: If the language is not registered
        """
        if not language:
            raise ValueError("language is required")
        if registry is None:
            raise ValueError("registry is required")
        if not registry.is_supported(language):
            raise ValueError(f"Language '{language}' is not supported by the language registry.")

        self._language = language
        self._registry = registry

    @property
    def language(self) -> str:
        return self._language

    @property
    def supported_extensions(self) -> List[str]:
        return self._registry.get_extensions(self._language)

    async def parse(
        self,
        source: Optional[str],
        file_path: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ParseResult[SyntaxTree]:
        """
        Parse source text into a SyntaxTree.

        Args:
            source: Source text
            file_path: Path of the file, used for diagnostics
            cancel_event: Cancellation signal forwarded to the adapter

        Returns:
            ParseResult holding the tree or the failure
        """
        if not source:
            return ParseResult.fail(self._error(EMPTY_SOURCE_MESSAGE, file_path))

        logger.debug(f"Parsing source code for language {self._language}")
        try:
            parser = await self._registry.get_parser(self._language)
            if parser is None:
                return ParseResult.fail(
                    self._error(f"No parser available for language '{self._language}'", file_path)
                )
            return await parser.parse(source, file_path, cancel_event)
        except (MemoryError, asyncio.CancelledError):
            raise
        except Exception as e:
            logger.error(f"Error parsing source code for language {self._language}: {e}")
            return ParseResult.fail(self._error(f"Parsing failed: {e}", file_path))

    async def parse_to_definition(
        self,
        source: Optional[str],
        file_path: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ParseResult[CompilationUnitDefinition]:
        """Parse source text and convert the tree into a compilation unit definition."""
        result = await self.parse(source, file_path, cancel_event)
        if result.is_failure:
            return ParseResult.fail(result.error)

        try:
            return ParseResult.ok(result.value.to_definition())
        except MemoryError:
            raise
        except Exception as e:
            logger.error(
                f"Error converting syntax tree to definition for language {self._language}: {e}"
            )
            return ParseResult.fail(self._error(f"Definition conversion failed: {e}", file_path))

    async def validate_syntax(
        self,
        source: Optional[str],
        file_path: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ParseResult[bool]:
        """
        Check whether source text parses without syntax errors.

        A failed parse is reported as a successful result holding False.
        """
        result = await self.parse(source, file_path, cancel_event)
        if result.is_failure:
            return ParseResult.ok(False)
        return ParseResult.ok(not result.value.has_errors)

    async def get_syntax_errors(
        self,
        source: Optional[str],
        file_path: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ParseResult[Tuple[SyntaxDiagnostic, ...]]:
        """
        Get the syntax errors of source text.

        A failed parse yields an empty tuple rather than a failure.
        """
        result = await self.parse(source, file_path, cancel_event)
        if result.is_failure:
            return ParseResult.ok(())
        return ParseResult.ok(result.value.errors)

    def _error(self, message: str, file_path: Optional[str]) -> ParsingError:
        return ParsingError(message, file_path=file_path, language=self._language)

    def __repr__(self) -> str:
        return f"CodeParser(language={self._language!r})"
