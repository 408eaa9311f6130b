"""Color-coded rendering of the agent event timeline."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .ansi_colors import (
    FG_BLUE,
    FG_CYAN,
    FG_GRAY,
    FG_GREEN,
    FG_MAGENTA,
    FG_RED,
    FG_YELLOW,
    ColorMode,
    style,
)
from .domain_types import AgentEvent, EventStatus, EventType

__all__ = ["render_event_line", "render_timeline"]

_TYPE_COLORS = {
    EventType.REASONING: FG_MAGENTA,
    EventType.TOOL_CALL: FG_BLUE,
    EventType.MAP_UPDATE: FG_CYAN,
    EventType.ERROR: FG_RED,
}

_STATUS_MARKS = {
    EventStatus.PENDING: ("…", FG_YELLOW),
    EventStatus.COMPLETED: ("✓", FG_GREEN),
    EventStatus.FAILED: ("✗", FG_RED),
}


def render_event_line(event: AgentEvent, mode: ColorMode, *, details: bool = True) -> str:
    """
    Render one timeline entry.

    Args:
        event: Event from the session log
        mode: Color mode configuration
        details: Append the event description on a second, dimmed line

    Returns:
        Formatted text (one or two lines)
    """
    clock = datetime.fromtimestamp(event.timestamp).strftime("%H:%M:%S")
    mark, mark_color = _STATUS_MARKS[event.status]
    kind = style(f"{event.type.value:<10}", mode=mode, fg=_TYPE_COLORS[event.type], bold=True)
    line = f"{clock}  {style(mark, mode=mode, fg=mark_color)} {kind}  {event.title}"
    if details and event.description:
        line += "\n" + style(f"          {_shorten(event.description)}", mode=mode, fg=FG_GRAY, dim=True)
    return line


def render_timeline(events: Iterable[AgentEvent], mode: ColorMode) -> str:
    lines = [render_event_line(event, mode) for event in events]
    return "\n".join(lines) if lines else "(no agent events)"


def _shorten(text: str, limit: int = 160) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."
