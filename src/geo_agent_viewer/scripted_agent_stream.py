from __future__ import annotations

import threading
from typing import Callable, Iterator, Sequence

from loguru import logger

from .agent_stream import AgentStream
from .demo_scripts import (
    Pause,
    Script,
    fallback_script,
    healthcare_facilities_script,
    population_stress_script,
    projected_population_script,
)
from .domain_types import StreamUpdate

# Checked in order; the first branch with a matching keyword wins
SCRIPT_BRANCHES: Sequence[tuple[str, tuple[str, ...], Callable[[], Script]]] = (
    ("projected_population", ("projected", "highlight"), projected_population_script),
    ("healthcare_facilities", ("show", "nwt"), healthcare_facilities_script),
    ("population_stress", ("expansion", "stress"), population_stress_script),
)


def select_script(turn_input: str) -> tuple[str, Script]:
    """Pick the demo script for a prompt by keyword priority."""
    lowered = turn_input.lower()
    for name, keywords, build in SCRIPT_BRANCHES:
        if any(keyword in lowered for keyword in keywords):
            return name, build()
    return "fallback", fallback_script()


class ScriptedAgentStream(AgentStream):
    """
    Deterministic stand-in for the live agent backend.

    Args:
        delay_multiplier: Scales every scripted pause (0 plays instantly)
    """

    def __init__(self, delay_multiplier: float = 0.5) -> None:
        self.delay_multiplier = max(delay_multiplier, 0.0)

    def run(self, turn_input: str, abort: threading.Event | None = None) -> Iterator[StreamUpdate]:
        abort = abort or threading.Event()
        name, script = select_script(turn_input)
        logger.debug("Playing scripted scenario {}", name)

        for step in script:
            if abort.is_set():
                return
            if isinstance(step, Pause):
                # wait() returns early (True) once the abort flag is set
                if self.delay_multiplier and abort.wait(step.ms * self.delay_multiplier / 1000.0):
                    return
                continue
            yield step
