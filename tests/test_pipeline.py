from __future__ import annotations

from pathlib import Path

import pytest
from obsidian_export.config import ExporterConfig
from obsidian_export.context import Context
from obsidian_export.errors import PostprocessorError
from obsidian_export.markdown import Text
from obsidian_export.pipeline import PostprocessorResult, run_postprocessors


def _context() -> Context:
    return Context(
        current_file=Path("Note.md"),
        root_file=Path("Note.md"),
        destination=Path("out/Note.md"),
    )


def _recorder(calls: list[str], name: str, result: PostprocessorResult):
    def postprocessor(context, events, config):
        calls.append(name)
        return result

    return postprocessor


def test_chain_runs_in_order_and_continues() -> None:
    calls: list[str] = []
    chain = [
        _recorder(calls, "first", PostprocessorResult.CONTINUE),
        _recorder(calls, "second", PostprocessorResult.CONTINUE),
    ]

    result = run_postprocessors(chain, _context(), [], ExporterConfig())

    assert result is PostprocessorResult.CONTINUE
    assert calls == ["first", "second"]


@pytest.mark.parametrize(
    "stop",
    [PostprocessorResult.STOP_HERE, PostprocessorResult.STOP_AND_SKIP_NOTE],
)
def test_chain_stops_at_first_non_continue(stop: PostprocessorResult) -> None:
    calls: list[str] = []
    chain = [
        _recorder(calls, "first", stop),
        _recorder(calls, "second", PostprocessorResult.CONTINUE),
    ]

    assert run_postprocessors(chain, _context(), [], ExporterConfig()) is stop
    assert calls == ["first"]


def test_postprocessors_mutate_events_in_place() -> None:
    events = [Text("foo")]

    def shout(context, events, config):
        events[0] = Text(events[0].text.upper())
        return PostprocessorResult.CONTINUE

    run_postprocessors([shout], _context(), events, ExporterConfig())

    assert events == [Text("FOO")]


def test_non_result_return_value_is_rejected() -> None:
    def broken(context, events, config):
        return None

    with pytest.raises(PostprocessorError) as exc_info:
        run_postprocessors([broken], _context(), [], ExporterConfig())

    assert "broken" in str(exc_info.value)


def test_empty_chain_continues() -> None:
    assert run_postprocessors([], _context(), [], ExporterConfig()) is PostprocessorResult.CONTINUE
