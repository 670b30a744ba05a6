"""Unit tests for the LanguageParser lifecycle."""

import asyncio
from typing import Optional

import pytest

from polyast.errors import InvalidStateTransitionError, ParserDisposedError
from polyast.models import SourceLocation
from polyast.tree import AstNode, SyntaxTree
from polyast.utils.metrics import ParseMetricsCollector
from parsers.base import LanguageParser, ParserState


class FakeParser(LanguageParser):
    """In-memory adapter: every source parses to a program with one statement per line."""

    def __init__(self, metrics=None, init_error=None, parse_error=None, init_delay=0.0):
        super().__init__("fake", metrics=metrics)
        self.init_error = init_error
        self.parse_error = parse_error
        self.init_delay = init_delay
        self.init_calls = 0
        self.parse_calls = 0
        self.dispose_calls = 0
        self.active_parses = 0
        self.max_active_parses = 0

    async def _initialize_language(self) -> None:
        self.init_calls += 1
        if self.init_delay:
            await asyncio.sleep(self.init_delay)
        if self.init_error is not None:
            raise self.init_error

    async def _parse_source(self, source: str, file_path: Optional[str]) -> AstNode:
        self.parse_calls += 1
        self.active_parses += 1
        self.max_active_parses = max(self.max_active_parses, self.active_parses)
        try:
            await asyncio.sleep(0)
            if self.parse_error is not None:
                raise self.parse_error

            root = AstNode("program", location=SourceLocation(start_offset=0, end_offset=len(source)))
            offset = 0
            for line in source.split("\n"):
                statement = AstNode(
                    "statement",
                    location=SourceLocation(start_offset=offset, end_offset=offset + len(line)),
                )
                statement.set_error(line.strip() == "?")
                root.add_child(statement)
                offset += len(line) + 1
            return root
        finally:
            self.active_parses -= 1

    def _dispose_language(self) -> None:
        self.dispose_calls += 1


class TestInitialize:
    """Tests for initialize()."""

    @pytest.mark.asyncio
    async def test_initial_state(self):
        parser = FakeParser()

        assert parser.state == ParserState.UNINITIALIZED
        assert not parser.is_initialized
        assert parser.language == "fake"

    @pytest.mark.asyncio
    async def test_initialize_moves_to_initialized(self):
        parser = FakeParser()

        await parser.initialize()

        assert parser.state == ParserState.INITIALIZED
        assert parser.is_initialized

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self):
        parser = FakeParser()

        await parser.initialize()
        await parser.initialize()

        assert parser.init_calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_initialize_loads_once(self):
        parser = FakeParser(init_delay=0.01)

        await asyncio.gather(*(parser.initialize() for _ in range(5)))

        assert parser.init_calls == 1
        assert parser.is_initialized

    @pytest.mark.asyncio
    async def test_failure_returns_to_uninitialized(self):
        """A failed load can be retried."""
        parser = FakeParser(init_error=ImportError("grammar not installed"))

        with pytest.raises(ImportError):
            await parser.initialize()
        assert parser.state == ParserState.UNINITIALIZED

        parser.init_error = None
        await parser.initialize()
        assert parser.is_initialized
        assert parser.init_calls == 2

    @pytest.mark.asyncio
    async def test_memory_error_propagates(self):
        parser = FakeParser(init_error=MemoryError())

        with pytest.raises(MemoryError):
            await parser.initialize()

    @pytest.mark.asyncio
    async def test_initialize_after_dispose(self):
        parser = FakeParser()
        parser.dispose()

        with pytest.raises(ParserDisposedError) as exc_info:
            await parser.initialize()
        assert "Cannot access a disposed parser" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_dispose_during_initialize(self):
        """Disposing while the grammar loads releases the engine and fails the load."""
        parser = FakeParser(init_delay=0.05)

        task = asyncio.ensure_future(parser.initialize())
        await asyncio.sleep(0.01)
        parser.dispose()

        with pytest.raises(ParserDisposedError):
            await task
        assert parser.state == ParserState.DISPOSED
        assert parser.dispose_calls == 1

    @pytest.mark.asyncio
    async def test_cancel_event_before_initialize(self):
        parser = FakeParser()
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(asyncio.CancelledError):
            await parser.initialize(cancel)
        assert parser.init_calls == 0
        assert parser.state == ParserState.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_initialization_time_recorded(self):
        metrics = ParseMetricsCollector()
        parser = FakeParser(metrics=metrics)

        await parser.initialize()

        assert "fake" in metrics.initialization_ms


class TestParse:
    """Tests for parse()."""

    @pytest.mark.asyncio
    async def test_parse_success(self):
        parser = FakeParser()

        result = await parser.parse("a\nb", "file.fake")

        assert result.success
        tree = result.value
        assert isinstance(tree, SyntaxTree)
        assert tree.language == "fake"
        assert tree.file_path == "file.fake"
        assert tree.source_text == "a\nb"
        assert len(tree.root.children) == 2

    @pytest.mark.asyncio
    async def test_parse_initializes_implicitly(self):
        parser = FakeParser()

        await parser.parse("a")

        assert parser.is_initialized
        assert parser.init_calls == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", ["", None])
    async def test_empty_source(self, source):
        """Empty input fails without loading the grammar or parsing."""
        parser = FakeParser()

        result = await parser.parse(source)

        assert result.is_failure
        assert result.message == "Source code cannot be null or empty"
        assert parser.init_calls == 0
        assert parser.parse_calls == 0

    @pytest.mark.asyncio
    async def test_engine_failure_becomes_result(self):
        parser = FakeParser(parse_error=RuntimeError("engine crashed"))

        result = await parser.parse("a", "broken.fake")

        assert result.is_failure
        assert result.message == "Parsing failed: engine crashed"
        assert result.error.file_path == "broken.fake"
        assert result.error.language == "fake"

    @pytest.mark.asyncio
    async def test_initialize_failure_becomes_result(self):
        parser = FakeParser(init_error=ImportError("no grammar"))

        result = await parser.parse("a")

        assert result.is_failure
        assert "no grammar" in result.message
        assert parser.state == ParserState.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_memory_error_not_wrapped(self):
        parser = FakeParser(parse_error=MemoryError())

        with pytest.raises(MemoryError):
            await parser.parse("a")

    @pytest.mark.asyncio
    async def test_syntax_errors_still_succeed(self):
        """A tree with error nodes is a successful parse."""
        parser = FakeParser()

        result = await parser.parse("a\n?")

        assert result.success
        assert result.value.has_errors
        assert len(result.value.errors) == 1

    @pytest.mark.asyncio
    async def test_parse_after_dispose(self):
        parser = FakeParser()
        await parser.initialize()
        parser.dispose()

        with pytest.raises(ParserDisposedError):
            await parser.parse("a")

    @pytest.mark.asyncio
    async def test_cancel_event(self):
        parser = FakeParser()
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(asyncio.CancelledError):
            await parser.parse("a", cancel_event=cancel)
        assert parser.parse_calls == 0

    @pytest.mark.asyncio
    async def test_concurrent_parses_are_serialized(self):
        parser = FakeParser()

        results = await asyncio.gather(*(parser.parse(f"line {i}") for i in range(10)))

        assert all(r.success for r in results)
        assert parser.max_active_parses == 1
        assert parser.parse_calls == 10

    @pytest.mark.asyncio
    async def test_parse_metrics_recorded(self):
        metrics = ParseMetricsCollector()
        parser = FakeParser(metrics=metrics)

        await parser.parse("a\nb")
        parser.parse_error = RuntimeError("boom")
        await parser.parse("c")

        assert metrics.parse_counts["fake"] == 2
        assert metrics.failure_counts["fake"] == 1
        assert metrics.nodes_parsed == 3


class TestDispose:
    """Tests for dispose() and context managers."""

    @pytest.mark.asyncio
    async def test_dispose_is_idempotent(self):
        parser = FakeParser()
        await parser.initialize()

        parser.dispose()
        parser.dispose()

        assert parser.state == ParserState.DISPOSED
        assert parser.dispose_calls == 1

    def test_dispose_uninitialized_skips_engine_release(self):
        parser = FakeParser()

        parser.dispose()

        assert parser.is_disposed
        assert parser.dispose_calls == 0

    def test_sync_context_manager(self):
        with FakeParser() as parser:
            assert parser.state == ParserState.UNINITIALIZED

        assert parser.is_disposed

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        async with FakeParser() as parser:
            assert parser.is_initialized
            result = await parser.parse("a")
            assert result.success

        assert parser.is_disposed
        assert parser.dispose_calls == 1

    def test_invalid_transition_rejected(self):
        """Disposed is terminal."""
        parser = FakeParser()
        parser.dispose()

        with pytest.raises(InvalidStateTransitionError):
            parser._transition(ParserState.INITIALIZING)

    def test_language_required(self):
        class Unnamed(FakeParser):
            def __init__(self):
                LanguageParser.__init__(self, "")

        with pytest.raises(ValueError):
            Unnamed()
