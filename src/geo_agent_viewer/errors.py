"""Exception types raised across the ingestion pipeline."""
from __future__ import annotations


class ViewerError(Exception):
    """Base class for all errors raised by this package."""


class DecodeError(ViewerError):
    """A frame payload could not be parsed. The frame is dropped, the stream continues."""

    def __init__(self, payload: str, reason: str) -> None:
        super().__init__(f"Undecodable frame ({reason}): {payload[:80]!r}")
        self.payload = payload
        self.reason = reason


class TransportError(ViewerError):
    """The transport failed or returned no body. Fatal to the current turn only."""


class CollaboratorError(ViewerError):
    """Session initialization or boundary overlay fetch failed."""


class TurnInProgressError(ViewerError):
    """A turn was sent while another turn is still streaming."""
