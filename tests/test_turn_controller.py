from __future__ import annotations

import threading
import time
from typing import Callable, Iterator

import pytest

from geo_agent_viewer.domain_types import (
    ContentDelta,
    EventRecord,
    EventStatus,
    EventType,
    MapPatch,
    Session,
    StreamUpdate,
    TurnState,
)
from geo_agent_viewer.errors import TransportError, TurnInProgressError
from geo_agent_viewer.session_reducer import ERROR_NOTE
from geo_agent_viewer.turn_controller import TurnController


class ListStream:
    """Yields a fixed list of updates, optionally running a hook before each one."""

    def __init__(self, updates: list[StreamUpdate], hook: Callable[[int, threading.Event], None] | None = None) -> None:
        self.updates = updates
        self.hook = hook
        self.closed = False
        self.cancelled = False

    def run(self, turn_input: str, abort: threading.Event | None = None) -> Iterator[StreamUpdate]:
        abort = abort or threading.Event()
        try:
            for index, update in enumerate(self.updates):
                if self.hook is not None:
                    self.hook(index, abort)
                yield update
        finally:
            self.closed = True

    def cancel(self) -> None:
        self.cancelled = True


def _record(title: str) -> EventRecord:
    return EventRecord(type=EventType.TOOL_CALL, title=title, description=None, status=EventStatus.COMPLETED)


def test_events_keep_producer_order_regardless_of_listener_cost() -> None:
    titles = [f"step-{i}" for i in range(8)]

    def slow_listener(session: Session) -> None:
        time.sleep(0.002 * (len(session.events) % 3))

    controller = TurnController(ListStream([_record(t) for t in titles]), on_update=slow_listener)
    session = controller.send("go")

    assert [e.title for e in session.events] == titles


def test_listener_sees_every_reduction() -> None:
    snapshots: list[Session] = []
    controller = TurnController(ListStream([ContentDelta("a"), ContentDelta("b")]), on_update=snapshots.append)
    controller.send("go")

    contents = [s.messages[-1].content for s in snapshots]
    # begin_turn, two deltas, end_turn
    assert contents == ["", "a", "ab", "ab"]
    assert snapshots[1].turn_state is TurnState.STREAMING
    assert snapshots[-1].turn_state is TurnState.IDLE


def test_second_send_while_streaming_is_refused() -> None:
    refused: list[Exception] = []
    holder: dict[str, TurnController] = {}

    def send_again(index: int, abort: threading.Event) -> None:
        if index == 0:
            try:
                holder["controller"].send("second")
            except TurnInProgressError as exc:
                refused.append(exc)

    controller = TurnController(ListStream([ContentDelta("only once")], hook=send_again))
    holder["controller"] = controller
    session = controller.send("first")

    assert len(refused) == 1
    assert [m.content for m in session.messages] == ["first", "only once"]


def test_abort_discards_pending_update_and_fails_turn() -> None:
    def abort_at_second(index: int, abort: threading.Event) -> None:
        if index == 1:
            abort.set()

    stream = ListStream([ContentDelta("kept "), ContentDelta("dropped")], hook=abort_at_second)
    session = TurnController(stream).send("go")

    assert session.messages[-1].content == "kept " + ERROR_NOTE
    assert session.events[-1].title == "Turn Aborted"
    assert session.events[-1].status is EventStatus.FAILED
    assert session.turn_state is TurnState.IDLE
    assert stream.closed is True


def test_abort_while_idle_is_a_noop() -> None:
    controller = TurnController(ListStream([ContentDelta("x")]))
    controller.abort()
    session = controller.send("go")
    assert session.messages[-1].content == "x"
    assert session.events == ()


def test_raised_transport_error_fails_turn() -> None:
    class BrokenStream:
        def run(self, turn_input: str, abort: threading.Event | None = None) -> Iterator[StreamUpdate]:
            yield ContentDelta("partial")
            raise TransportError("No response body")

    controller = TurnController(BrokenStream())
    session = controller.send("go")

    assert session.messages[-1].content == "partial" + ERROR_NOTE
    assert session.events[-1].type is EventType.ERROR
    assert controller.is_streaming is False


def test_unexpected_error_still_returns_to_idle() -> None:
    class ExplodingStream:
        def run(self, turn_input: str, abort: threading.Event | None = None) -> Iterator[StreamUpdate]:
            raise RuntimeError("bug")
            yield  # pragma: no cover

    controller = TurnController(ExplodingStream())
    with pytest.raises(RuntimeError):
        controller.send("go")
    assert controller.is_streaming is False
    # The controller accepts the next turn
    controller.stream = ListStream([ContentDelta("ok")])
    assert controller.send("again").messages[-1].content == "ok"


def test_error_record_from_producer_ends_turn() -> None:
    failure = EventRecord(type=EventType.ERROR, title="Connection Error", description=None, status=EventStatus.FAILED)
    stream = ListStream([ContentDelta("a"), failure, ContentDelta("never")])
    session = TurnController(stream).send("go")

    assert session.messages[-1].content == "a" + ERROR_NOTE
    assert [e.title for e in session.events] == ["Connection Error"]


def test_boundary_overlay_is_kept_across_turns() -> None:
    overlay = {"type": "FeatureCollection", "features": []}
    controller = TurnController(ListStream([MapPatch(markers=())]))
    controller.load_boundary_overlay(overlay)
    controller.send("one")
    controller.send("two")
    assert controller.snapshot.map_view.boundary_overlay is overlay


def test_listener_failure_during_cleanup_releases_the_turn() -> None:
    calls: list[Session] = []

    def broken_pipe(session: Session) -> None:
        calls.append(session)
        if len(calls) > 1:
            raise BrokenPipeError("stdout closed")

    controller = TurnController(ListStream([ContentDelta("a"), ContentDelta("b")]), on_update=broken_pipe)
    with pytest.raises(BrokenPipeError):
        controller.send("first")
    assert controller.is_streaming is False

    # Still failing listener: the next turn starts and fails the same way instead of being refused
    with pytest.raises(BrokenPipeError):
        controller.send("second")

    controller.on_update = None
    session = controller.send("third")
    assert session.messages[-1].content == "ab"
    assert session.turn_state is TurnState.IDLE


def test_abort_asks_the_producer_to_cancel() -> None:
    holder: dict[str, TurnController] = {}

    def abort_from_listener(index: int, abort: threading.Event) -> None:
        if index == 1:
            holder["controller"].abort()

    stream = ListStream([ContentDelta("a"), ContentDelta("b")], hook=abort_from_listener)
    controller = TurnController(stream)
    holder["controller"] = controller
    session = controller.send("go")

    assert stream.cancelled is True
    assert session.events[-1].title == "Turn Aborted"
