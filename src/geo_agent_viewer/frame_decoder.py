"""Line buffering for the `data: ` framed event stream."""
from __future__ import annotations

from typing import Iterator

__all__ = ["DATA_PREFIX", "DONE_SENTINEL", "FrameDecoder"]

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class FrameDecoder:
    """
    Split arbitrary text fragments into frame payloads.

    A partial trailing line is retained between calls to `feed`, so a frame
    split across fragments is yielded once its line break arrives.
    The `[DONE]` sentinel is swallowed and only recorded in `saw_done`;
    end of stream is the transport closing.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self.saw_done = False

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, fragment: str) -> Iterator[str]:
        """
        Buffer a fragment and yield payloads of every completed line.

        Args:
            fragment: Raw text as received from the transport

        Yields:
            Frame payloads with the `data: ` prefix removed
        """
        lines = (self._buffer + fragment).split("\n")
        self._buffer = lines.pop()
        for line in lines:
            payload = self._payload(line)
            if payload is not None:
                yield payload

    def flush(self) -> Iterator[str]:
        """Treat the retained partial line as complete and empty the buffer."""
        line, self._buffer = self._buffer, ""
        payload = self._payload(line)
        if payload is not None:
            yield payload

    def reset(self) -> None:
        self._buffer = ""

    def _payload(self, line: str) -> str | None:
        trimmed = line.strip()
        if not trimmed.startswith(DATA_PREFIX):
            return None
        payload = trimmed[len(DATA_PREFIX):]
        if payload == DONE_SENTINEL:
            self.saw_done = True
            return None
        return payload
