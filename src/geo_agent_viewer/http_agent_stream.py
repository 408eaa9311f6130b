from __future__ import annotations

import threading
import time
from typing import Any, Iterator, Optional

import httpx
from loguru import logger

from .agent_stream import AgentStream
from .domain_types import EventRecord, EventStatus, EventType, StreamUpdate
from .errors import DecodeError, TransportError
from .frame_decoder import FrameDecoder
from .update_classifier import classify

CONNECTION_ERROR_TITLE = "Connection Error"
CONNECTION_ERROR_DESCRIPTION = "Failed to connect to ADK backend."


def connection_error_record(description: str = CONNECTION_ERROR_DESCRIPTION) -> EventRecord:
    return EventRecord(
        type=EventType.ERROR,
        title=CONNECTION_ERROR_TITLE,
        description=description,
        status=EventStatus.FAILED,
    )


class HttpAgentStream(AgentStream):
    def __init__(
        self,
        base_url: str,
        app_name: str,
        user_id: str,
        session_id: str,
        token: Optional[str] = None,
        timeout_secs: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.app_name = app_name
        self.user_id = user_id
        self.session_id = session_id
        self.token = token
        self.timeout = timeout_secs
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"
        self._response: Optional[httpx.Response] = None
        self._response_lock = threading.Lock()

    def init_session(self) -> None:
        """Announce the session to the backend. Failures are logged and ignored."""
        url = f"{self.base_url}/apps/{self.app_name}/users/{self.user_id}/sessions/{self.session_id}"
        body = {"key1": "init", "ts": int(time.time() * 1000)}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(url, json=body, headers=self.headers)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to initialize backend session: {}", exc)
            return
        logger.info("Session {} initialized for user {}", self.session_id, self.user_id)

    def cancel(self) -> None:
        """Close the in-flight response so a read blocked on the backend returns."""
        with self._response_lock:
            resp = self._response
        if resp is not None:
            logger.debug("Closing in-flight response for session {}", self.session_id)
            resp.close()

    def run(self, turn_input: str, abort: threading.Event | None = None) -> Iterator[StreamUpdate]:
        """
        Stream one turn from the `/run_sse` endpoint.

        Args:
            turn_input: The user's message text
            abort: When set, reading stops before the next fragment. Pair with
                `cancel()` to also unblock a read that is waiting on the backend.

        Yields:
            Stream updates in arrival order. A transport failure yields a single
            failed error record and ends the stream.
        """
        abort = abort or threading.Event()
        url = f"{self.base_url}/run_sse"
        headers = dict(self.headers)
        headers["Accept"] = "text/event-stream"
        decoder = FrameDecoder()

        try:
            # Read timeout bounds the wait for each fragment, not the whole turn
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                with client.stream("POST", url, json=self._turn_payload(turn_input), headers=headers) as resp:
                    self._attach(resp)
                    try:
                        resp.raise_for_status()
                        received = False
                        # An abort that raced the connect never reaches a blocking read
                        fragments = iter(()) if abort.is_set() else resp.iter_text()
                        for fragment in fragments:
                            if abort.is_set():
                                break
                            received = received or bool(fragment)
                            for frame in decoder.feed(fragment):
                                yield from self._decode(frame)
                        if abort.is_set():
                            decoder.reset()
                            logger.info("Turn aborted, closing stream")
                            return
                        if not received:
                            raise TransportError("No response body")
                        for frame in decoder.flush():
                            yield from self._decode(frame)
                    finally:
                        self._attach(None)
        except httpx.StreamError:
            # cancel() closed the response under a read
            if not abort.is_set():
                raise
            decoder.reset()
            logger.info("Turn aborted, stream closed")
            return
        except (httpx.HTTPError, TransportError) as exc:
            if abort.is_set():
                decoder.reset()
                logger.info("Turn aborted, read interrupted: {}", exc)
                return
            logger.error("Stream error: {}", exc)
            yield connection_error_record()
            return

        if not decoder.saw_done:
            logger.debug("Stream closed without [DONE]; treating transport close as end of turn")

    def _attach(self, resp: Optional[httpx.Response]) -> None:
        with self._response_lock:
            self._response = resp

    def _turn_payload(self, turn_input: str) -> dict[str, Any]:
        return {
            "appName": self.app_name,
            "userId": self.user_id,
            "sessionId": self.session_id,
            "newMessage": {"role": "user", "parts": [{"text": turn_input}]},
            "streaming": True,
        }

    def _decode(self, frame: str) -> list[StreamUpdate]:
        try:
            return classify(frame)
        except DecodeError as exc:
            logger.warning("Failed to parse SSE JSON: {}", exc)
            return []
