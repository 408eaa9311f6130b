from __future__ import annotations

import os
from unittest.mock import patch

from geo_agent_viewer.collaborators import CANADA_BOUNDARIES_URL
from geo_agent_viewer.config import ViewerConfig, build_stream
from geo_agent_viewer.http_agent_stream import HttpAgentStream
from geo_agent_viewer.scripted_agent_stream import ScriptedAgentStream


def test_defaults_select_simulator() -> None:
    with patch.dict(os.environ, {}, clear=True):
        config = ViewerConfig.from_env()
    assert config.use_live_backend is False
    assert config.boundary_url == CANADA_BOUNDARIES_URL
    stream = build_stream(config, session_id="s_1")
    assert isinstance(stream, ScriptedAgentStream)
    assert stream.delay_multiplier == 0.5


def test_base_url_selects_live_stream() -> None:
    env = {
        "GEO_AGENT_BASE_URL": "http://localhost:8000",
        "GEO_AGENT_APP_NAME": "geo_agent",
        "GEO_AGENT_USER_ID": "u_9",
        "GEO_AGENT_TOKEN": "secret-token",
        "GEO_AGENT_TIMEOUT_SECS": "30.0",
    }
    with patch.dict(os.environ, env, clear=True):
        config = ViewerConfig.from_env()
    stream = build_stream(config, session_id="s_1")
    assert isinstance(stream, HttpAgentStream)
    assert stream.base_url == "http://localhost:8000"
    assert stream.app_name == "geo_agent"
    assert stream.user_id == "u_9"
    assert stream.session_id == "s_1"
    assert stream.timeout == 30.0
    assert stream.headers["Authorization"] == "Bearer secret-token"


def test_simulate_flag_overrides_backend() -> None:
    config = ViewerConfig(base_url="http://localhost:8000", sim_delay=0.0)
    stream = build_stream(config, session_id="s_1", simulate=True)
    assert isinstance(stream, ScriptedAgentStream)
    assert stream.delay_multiplier == 0.0


def test_invalid_numbers_fall_back_to_defaults() -> None:
    config = ViewerConfig.from_env({"GEO_AGENT_TIMEOUT_SECS": "soon", "GEO_AGENT_SIM_DELAY": "fast"})
    assert config.timeout_secs == 15.0
    assert config.sim_delay == 0.5


def test_empty_boundary_url_disables_overlay() -> None:
    config = ViewerConfig.from_env({"GEO_AGENT_BOUNDARY_URL": "", "GEO_AGENT_LOG_LEVEL": "debug"})
    assert config.boundary_url == ""
    assert config.log_level == "DEBUG"
