from __future__ import annotations

import threading
from typing import Iterator, Protocol

from .domain_types import StreamUpdate


class AgentStream(Protocol):
    """A producer of stream updates for one turn, consumed by pulling."""

    def run(self, turn_input: str, abort: threading.Event | None = None) -> Iterator[StreamUpdate]: ...

    def cancel(self) -> None:
        """Unblock a read in progress after the abort flag was set. Called from another thread."""
        return None
