"""
Base interface for language-specific parser adapters.

This module defines the abstract base class that all language parsers must
implement. The base class owns the adapter lifecycle:

    UNINITIALIZED -> INITIALIZING -> INITIALIZED -> DISPOSED

DISPOSED is reachable from every state and is terminal. Subclasses only
provide the grammar load, the native parse and the engine release.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, FrozenSet, Optional

from polyast.errors import InvalidStateTransitionError, ParserDisposedError, ParsingError
from polyast.models.parse_result import ParseResult
from polyast.tree.ast_node import AstNode
from polyast.tree.syntax_tree import SyntaxTree
from polyast.utils.logging import (
    get_logger,
    log_error_with_context,
    log_lifecycle_transition,
    log_parse_event,
)
from polyast.utils.metrics import ParseMetricsCollector, track_initialization

EMPTY_SOURCE_MESSAGE = "Source code cannot be null or empty"


class ParserState(str, Enum):
    """Lifecycle states of a parser adapter."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    DISPOSED = "disposed"


_ALLOWED_TRANSITIONS: Dict[ParserState, FrozenSet[ParserState]] = {
    ParserState.UNINITIALIZED: frozenset({ParserState.INITIALIZING, ParserState.DISPOSED}),
    ParserState.INITIALIZING: frozenset({
        ParserState.INITIALIZED,
        ParserState.UNINITIALIZED,
        ParserState.DISPOSED,
    }),
    ParserState.INITIALIZED: frozenset({ParserState.DISPOSED}),
    ParserState.DISPOSED: frozenset(),
}


def raise_if_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    """Raise CancelledError if the caller's cancellation event is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError()


class LanguageParser(ABC):
    """Base interface for language parser adapters."""

    def __init__(
        self,
        language: str,
        metrics: Optional[ParseMetricsCollector] = None,
    ):
        """
        Initialize the adapter in the UNINITIALIZED state.

        Args:
            language: Language identifier (e.g. 'java', 'python')
            metrics: Optional collector for parse and initialization metrics
        """
        if not language:
            raise ValueError("language is required")

        self._language = language
        self._metrics = metrics
        self._state = ParserState.UNINITIALIZED
        self._lifecycle_lock = asyncio.Lock()
        self._parse_lock = asyncio.Lock()
        self._logger = get_logger(f"{__name__}.{type(self).__name__}", language=language)

    @property
    def language(self) -> str:
        return self._language

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is ParserState.INITIALIZED

    @property
    def is_disposed(self) -> bool:
        return self._state is ParserState.DISPOSED

    def _transition(self, target: ParserState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self._state]:
            raise InvalidStateTransitionError(
                f"{type(self).__name__} cannot move from {self._state.value} to {target.value}"
            )
        previous = self._state
        self._state = target
        log_lifecycle_transition(self._logger, self._language, previous.value, target.value)

    def _ensure_not_disposed(self) -> None:
        if self._state is ParserState.DISPOSED:
            raise ParserDisposedError(type(self).__name__)

    async def initialize(self, cancel_event: Optional[asyncio.Event] = None) -> None:
        """
        Load the grammar and prepare the native engine.

        Idempotent once initialized. Concurrent callers are serialized; only
        one of them performs the load. On failure the adapter returns to
        UNINITIALIZED so a later call can retry.

        Args:
            cancel_event: Checked before and after the grammar load

        Raises:
            ParserDisposedError: If the adapter has been disposed
            asyncio.CancelledError: If cancel_event is set
            Exception: Whatever the grammar load raised
        """
        self._ensure_not_disposed()
        if self._state is ParserState.INITIALIZED:
            return

        async with self._lifecycle_lock:
            self._ensure_not_disposed()
            if self._state is ParserState.INITIALIZED:
                return

            raise_if_cancelled(cancel_event)
            self._transition(ParserState.INITIALIZING)
            self._logger.debug(f"Initializing {self._language} parser")

            try:
                async with track_initialization(self._metrics, self._language):
                    await self._initialize_language()
            except MemoryError:
                raise
            except BaseException as e:
                if self._state is ParserState.INITIALIZING:
                    self._transition(ParserState.UNINITIALIZED)
                if isinstance(e, Exception):
                    log_error_with_context(
                        self._logger,
                        f"Failed to initialize {self._language} parser",
                        e,
                        language=self._language,
                    )
                raise

            if self._state is ParserState.DISPOSED:
                # dispose() ran while the grammar was loading
                self._dispose_language()
                raise ParserDisposedError(type(self).__name__)

            self._transition(ParserState.INITIALIZED)
            self._logger.debug(f"Successfully initialized {self._language} parser")

        raise_if_cancelled(cancel_event)

    async def parse(
        self,
        source: Optional[str],
        file_path: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ParseResult[SyntaxTree]:
        """
        Parse source text into a SyntaxTree.

        Initializes the adapter first if needed. Validation, initialization
        and engine failures are returned as failed results.

        Args:
            source: Source text to parse
            file_path: Path of the file, used for diagnostics
            cancel_event: Checked before and after the native parse

        Returns:
            ParseResult holding the SyntaxTree or a ParsingError

        Raises:
            ParserDisposedError: If the adapter has been disposed
            asyncio.CancelledError: If cancel_event is set
        """
        self._ensure_not_disposed()

        if not source:
            return ParseResult.fail(
                ParsingError(EMPTY_SOURCE_MESSAGE, file_path=file_path, language=self._language)
            )

        if self._state is not ParserState.INITIALIZED:
            try:
                await self.initialize(cancel_event)
            except (MemoryError, ParserDisposedError):
                raise
            except Exception as e:
                return ParseResult.fail(
                    ParsingError(
                        f"Initialization failed: {e}",
                        file_path=file_path,
                        language=self._language,
                    )
                )

        raise_if_cancelled(cancel_event)

        start_time = time.perf_counter()
        try:
            async with self._parse_lock:
                self._ensure_not_disposed()
                root = await self._parse_source(source, file_path)
        except (MemoryError, ParserDisposedError):
            raise
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._record_parse(duration_ms, success=False)
            log_parse_event(
                self._logger, self._language, file_path, duration_ms, error=str(e)
            )
            return ParseResult.fail(
                ParsingError(f"Parsing failed: {e}", file_path=file_path, language=self._language)
            )

        raise_if_cancelled(cancel_event)

        tree = SyntaxTree(root, source, self._language, file_path)
        metrics = tree.get_metrics()
        duration_ms = (time.perf_counter() - start_time) * 1000
        self._record_parse(duration_ms, success=True, node_count=metrics.total_nodes)
        log_parse_event(
            self._logger,
            self._language,
            file_path,
            duration_ms,
            node_count=metrics.total_nodes,
            error_count=metrics.error_count,
        )
        return ParseResult.ok(tree)

    def dispose(self) -> None:
        """
        Release the native engine. Safe to call more than once.

        Any later initialize() or parse() raises ParserDisposedError.
        """
        if self._state is ParserState.DISPOSED:
            return

        previous = self._state
        self._transition(ParserState.DISPOSED)
        if previous is ParserState.INITIALIZED:
            self._logger.debug(f"Disposing {self._language} parser")
            self._dispose_language()

    def _record_parse(self, duration_ms: float, success: bool, node_count: int = 0) -> None:
        if self._metrics is not None:
            self._metrics.record_parse(self._language, duration_ms, success, node_count)

    @abstractmethod
    async def _initialize_language(self) -> None:
        """
        Load the language grammar and create the native engine.

        Raises:
            Exception: If the grammar cannot be loaded
        """
        pass

    @abstractmethod
    async def _parse_source(self, source: str, file_path: Optional[str]) -> AstNode:
        """
        Parse non-empty source text with the native engine.

        Args:
            source: Source text to parse
            file_path: Path of the file, if known

        Returns:
            Root AstNode of the parsed tree
        """
        pass

    def _dispose_language(self) -> None:
        """Release language-specific resources. Called at most once."""
        pass

    def __enter__(self) -> "LanguageParser":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    async def __aenter__(self) -> "LanguageParser":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(language={self._language!r}, state={self._state.value})"
