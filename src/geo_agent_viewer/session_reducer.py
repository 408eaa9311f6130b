"""Pure state transitions for a viewer session.

Every function here takes a `Session` and returns a new one; nothing is
mutated in place. `reduce` folds a single stream update into the transcript,
the event log and the map view. The remaining functions move a session through
its turn lifecycle (idle -> streaming -> idle).
"""
from __future__ import annotations

import time
import uuid
from dataclasses import replace
from typing import Any, Callable

from .domain_types import (
    AgentEvent,
    ContentDelta,
    EventRecord,
    EventStatus,
    EventType,
    MapPatch,
    MapView,
    Message,
    MessageRole,
    Session,
    StreamUpdate,
    TurnState,
)
from .errors import TurnInProgressError

__all__ = [
    "ERROR_NOTE",
    "append_error_note",
    "apply_map_patch",
    "begin_turn",
    "end_turn",
    "fail_turn",
    "new_id",
    "new_session",
    "reduce",
    "set_boundary_overlay",
]

ERROR_NOTE = "\n[System Error: Could not complete response]"

Clock = Callable[[], float]
IdFactory = Callable[[], str]


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def new_session(session_id: str | None = None) -> Session:
    return Session(session_id=session_id or f"s_{new_id()}")


def reduce(
    session: Session,
    update: StreamUpdate,
    *,
    clock: Clock = time.time,
    id_factory: IdFactory = new_id,
) -> Session:
    """
    Fold one stream update into the session.

    Args:
        session: Current state
        update: Update to apply
        clock: Timestamp source for new events
        id_factory: Id source for new events

    Returns:
        The new session state
    """
    if isinstance(update, ContentDelta):
        return _update_active(session, lambda msg: replace(msg, content=msg.content + update.text))
    if isinstance(update, EventRecord):
        return _record_event(session, _instantiate(update, clock, id_factory))
    if isinstance(update, MapPatch):
        return replace(session, map_view=apply_map_patch(session.map_view, update))
    return session


def apply_map_patch(view: MapView, patch: MapPatch) -> MapView:
    """Replace the fields present in `patch`; absent fields and the boundary overlay are kept."""
    return MapView(
        center=patch.center if patch.center is not None else view.center,
        markers=patch.markers if patch.markers is not None else view.markers,
        polygons=patch.polygons if patch.polygons is not None else view.polygons,
        boundary_overlay=view.boundary_overlay,
    )


def set_boundary_overlay(session: Session, overlay: Any) -> Session:
    return replace(session, map_view=replace(session.map_view, boundary_overlay=overlay))


def begin_turn(session: Session, text: str, *, id_factory: IdFactory = new_id) -> Session:
    """
    Start a turn: append the user message and an empty assistant placeholder.

    Raises:
        TurnInProgressError: If the session is already streaming
    """
    if session.turn_state is TurnState.STREAMING:
        raise TurnInProgressError("A turn is already streaming")

    user = Message(id=id_factory(), role=MessageRole.USER, content=text)
    assistant = Message(id=id_factory(), role=MessageRole.ASSISTANT, content="")
    return replace(
        session,
        messages=(*session.messages, user, assistant),
        active_message_id=assistant.id,
        turn_state=TurnState.STREAMING,
    )


def end_turn(session: Session) -> Session:
    return replace(session, active_message_id=None, turn_state=TurnState.IDLE)


def append_error_note(session: Session) -> Session:
    return _update_active(session, lambda msg: replace(msg, content=msg.content + ERROR_NOTE))


def fail_turn(
    session: Session,
    *,
    title: str,
    description: str | None,
    clock: Clock = time.time,
    id_factory: IdFactory = new_id,
) -> Session:
    """Record a failed turn: one error event, a visible note, back to idle."""
    record = EventRecord(
        type=EventType.ERROR,
        title=title,
        description=description,
        status=EventStatus.FAILED,
    )
    session = reduce(session, record, clock=clock, id_factory=id_factory)
    return end_turn(append_error_note(session))


def _instantiate(record: EventRecord, clock: Clock, id_factory: IdFactory) -> AgentEvent:
    return AgentEvent(
        id=id_factory(),
        type=record.type,
        title=record.title,
        description=record.description,
        timestamp=clock(),
        status=record.status,
    )


def _record_event(session: Session, event: AgentEvent) -> Session:
    session = replace(session, events=(*session.events, event))
    return _update_active(
        session, lambda msg: replace(msg, related_events=(*msg.related_events, event))
    )


def _update_active(session: Session, change: Callable[[Message], Message]) -> Session:
    if session.active_message_id is None:
        return session
    messages = tuple(
        change(msg) if msg.id == session.active_message_id else msg for msg in session.messages
    )
    return replace(session, messages=messages)
