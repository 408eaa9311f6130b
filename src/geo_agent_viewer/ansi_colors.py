"""ANSI styling for terminal output."""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import TextIO

__all__ = [
    "ColorMode",
    "detect_color_mode",
    "style",
    "FG_RED",
    "FG_GREEN",
    "FG_YELLOW",
    "FG_BLUE",
    "FG_MAGENTA",
    "FG_CYAN",
    "FG_GRAY",
]

FG_RED = 31
FG_GREEN = 32
FG_YELLOW = 33
FG_BLUE = 34
FG_MAGENTA = 35
FG_CYAN = 36
FG_GRAY = 90


@dataclass(frozen=True)
class ColorMode:
    enabled: bool


def detect_color_mode(mode: str, stream: TextIO | None = None) -> ColorMode:
    """
    Decide whether output to `stream` should be colored.

    Args:
        mode: "auto", "always", or "never"
        stream: Output stream checked for a tty in auto mode (default stdout)
    """
    choice = (mode or "auto").lower().strip()
    if choice in ("always", "never"):
        return ColorMode(enabled=choice == "always")

    stream = stream or sys.stdout
    isatty = getattr(stream, "isatty", None)
    if not (isatty and isatty()) or os.getenv("NO_COLOR"):
        return ColorMode(enabled=False)
    return ColorMode(enabled=True)


def style(
    text: str,
    *,
    mode: ColorMode,
    fg: int | None = None,
    bold: bool = False,
    dim: bool = False,
) -> str:
    """Wrap `text` in SGR codes; returned unchanged when colors are off."""
    codes = [code for code, on in ((1, bold), (2, dim)) if on]
    if fg is not None:
        codes.append(fg)
    if not mode.enabled or not codes:
        return text
    return f"\x1b[{';'.join(map(str, codes))}m{text}\x1b[0m"
