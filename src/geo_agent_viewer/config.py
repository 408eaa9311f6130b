from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .agent_stream import AgentStream
from .collaborators import CANADA_BOUNDARIES_URL
from .http_agent_stream import HttpAgentStream
from .scripted_agent_stream import ScriptedAgentStream

DEFAULT_APP_NAME = "basic_search_agent"
DEFAULT_USER_ID = "u_123"
DEFAULT_TIMEOUT_SECS = 15.0
DEFAULT_SIM_DELAY = 0.5


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class ViewerConfig:
    base_url: str = ""
    app_name: str = DEFAULT_APP_NAME
    user_id: str = DEFAULT_USER_ID
    token: Optional[str] = None
    timeout_secs: float = DEFAULT_TIMEOUT_SECS
    sim_delay: float = DEFAULT_SIM_DELAY
    boundary_url: str = CANADA_BOUNDARIES_URL
    log_level: str = "WARNING"

    @property
    def use_live_backend(self) -> bool:
        return bool(self.base_url)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ViewerConfig":
        env = os.environ if env is None else env
        return cls(
            base_url=env.get("GEO_AGENT_BASE_URL", "").strip(),
            app_name=env.get("GEO_AGENT_APP_NAME", "").strip() or DEFAULT_APP_NAME,
            user_id=env.get("GEO_AGENT_USER_ID", "").strip() or DEFAULT_USER_ID,
            token=env.get("GEO_AGENT_TOKEN", "").strip() or None,
            timeout_secs=_float_env(env, "GEO_AGENT_TIMEOUT_SECS", DEFAULT_TIMEOUT_SECS),
            sim_delay=_float_env(env, "GEO_AGENT_SIM_DELAY", DEFAULT_SIM_DELAY),
            # An explicitly empty URL disables the overlay fetch
            boundary_url=env.get("GEO_AGENT_BOUNDARY_URL", CANADA_BOUNDARIES_URL).strip(),
            log_level=env.get("GEO_AGENT_LOG_LEVEL", "").strip().upper() or "WARNING",
        )


def build_stream(config: ViewerConfig, session_id: str, simulate: bool = False) -> AgentStream:
    """Select the producer for this process: live backend if configured, else the simulator."""
    if simulate or not config.use_live_backend:
        return ScriptedAgentStream(delay_multiplier=config.sim_delay)
    return HttpAgentStream(
        base_url=config.base_url,
        app_name=config.app_name,
        user_id=config.user_id,
        session_id=session_id,
        token=config.token,
        timeout_secs=config.timeout_secs,
    )
