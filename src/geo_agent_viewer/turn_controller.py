"""Single writer of session state: runs one turn at a time against a producer."""
from __future__ import annotations

import threading
from typing import Any, Callable, Optional

import httpx
from loguru import logger

from .agent_stream import AgentStream
from .domain_types import EventRecord, EventStatus, EventType, Session, TurnState
from .errors import TransportError, TurnInProgressError
from .http_agent_stream import CONNECTION_ERROR_DESCRIPTION, CONNECTION_ERROR_TITLE
from .session_reducer import (
    append_error_note,
    begin_turn,
    end_turn,
    fail_turn,
    new_session,
    reduce,
    set_boundary_overlay,
)

ABORT_TITLE = "Turn Aborted"
ABORT_DESCRIPTION = "The turn was cancelled before the agent finished."

SnapshotListener = Callable[[Session], None]


def _is_failure(update: object) -> bool:
    return (
        isinstance(update, EventRecord)
        and update.type is EventType.ERROR
        and update.status is EventStatus.FAILED
    )


class TurnController:
    def __init__(
        self,
        stream: AgentStream,
        session: Optional[Session] = None,
        on_update: Optional[SnapshotListener] = None,
    ) -> None:
        self.stream = stream
        self.on_update = on_update
        self._session = session or new_session()
        self._lock = threading.Lock()
        self._abort = threading.Event()

    @property
    def snapshot(self) -> Session:
        return self._session

    @property
    def is_streaming(self) -> bool:
        return self._session.turn_state is TurnState.STREAMING

    def load_boundary_overlay(self, overlay: Any) -> None:
        self._publish(set_boundary_overlay(self._session, overlay))

    def abort(self) -> None:
        """Ask the in-flight turn to stop. No-op while idle."""
        if self.is_streaming:
            self._abort.set()
            self.stream.cancel()

    def send(self, text: str) -> Session:
        """
        Run one full turn and return the final snapshot.

        Updates are reduced strictly in the order the producer yields them.
        The session is back to idle on every exit path.

        Raises:
            TurnInProgressError: If another turn is still streaming
        """
        if not self._lock.acquire(blocking=False):
            raise TurnInProgressError("A turn is already streaming")
        try:
            self._abort.clear()
            self._publish(begin_turn(self._session, text))
            logger.debug("Turn started in session {}", self._session.session_id)
            self._consume(text)
        finally:
            try:
                if self.is_streaming:
                    self._publish(end_turn(self._session))
            finally:
                self._lock.release()
        logger.debug("Turn finished with {} events in log", len(self._session.events))
        return self._session

    def _consume(self, text: str) -> None:
        updates = self.stream.run(text, self._abort)
        try:
            for update in updates:
                if self._abort.is_set():
                    break
                self._publish(reduce(self._session, update))
                if _is_failure(update):
                    self._publish(end_turn(append_error_note(self._session)))
                    return
        except (TransportError, httpx.HTTPError) as exc:
            logger.error("Stream error: {}", exc)
            self._publish(
                fail_turn(self._session, title=CONNECTION_ERROR_TITLE, description=CONNECTION_ERROR_DESCRIPTION)
            )
            return
        finally:
            close = getattr(updates, "close", None)
            if close is not None:
                close()

        if self._abort.is_set():
            logger.info("Turn aborted")
            self._publish(fail_turn(self._session, title=ABORT_TITLE, description=ABORT_DESCRIPTION))

    def _publish(self, session: Session) -> None:
        self._session = session
        if self.on_update is not None:
            self.on_update(session)
