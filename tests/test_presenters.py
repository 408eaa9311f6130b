from __future__ import annotations

import httpx

from geo_agent_viewer.ansi_colors import ColorMode, FG_RED, style
from geo_agent_viewer.collaborators import fetch_boundary_overlay
from geo_agent_viewer.domain_types import (
    AgentEvent,
    EventStatus,
    EventType,
    GeoLocation,
    GeoMarker,
    MapView,
)
from geo_agent_viewer.presenters import render_map_view, render_session
from geo_agent_viewer.scripted_agent_stream import ScriptedAgentStream
from geo_agent_viewer.timeline_presenter import render_event_line
from geo_agent_viewer.turn_controller import TurnController

PLAIN = ColorMode(enabled=False)


def test_style_is_noop_when_disabled() -> None:
    assert style("x", mode=PLAIN, fg=FG_RED, bold=True) == "x"
    assert style("x", mode=ColorMode(enabled=True), fg=FG_RED, bold=True) == "\x1b[1;31mx\x1b[0m"


def test_event_line_shows_type_status_and_description() -> None:
    event = AgentEvent(
        id="e1",
        type=EventType.TOOL_CALL,
        title="BigQuery Agent",
        description="Query completed.\nReturned 13 rows.",
        timestamp=0.0,
        status=EventStatus.COMPLETED,
    )
    first, second = render_event_line(event, PLAIN).split("\n")
    assert "✓ tool_call" in first
    assert first.endswith("BigQuery Agent")
    assert second.strip() == "Query completed. Returned 13 rows."
    assert "\n" not in render_event_line(event, PLAIN, details=False)


def test_empty_map_view_uses_default_center() -> None:
    text = render_map_view(MapView())
    assert "lat=56.1304 lng=-106.3468 zoom=4 (default)" in text
    assert "Boundary overlay: not loaded" in text


def test_map_view_lists_markers_and_overlay() -> None:
    view = MapView(
        center=GeoLocation(64.0, -119.0, 4),
        markers=(GeoMarker(position=(68.353, -133.695), title="Inuvik Regional Hospital"),),
        polygons=(),
        boundary_overlay={"features": [{}, {}]},
    )
    text = render_map_view(view)
    assert "Markers: 1" in text
    assert "Inuvik Regional Hospital (68.353, -133.695)" in text
    assert "Polygons: 0" in text
    assert "Boundary overlay: 2 features" in text


def test_render_session_after_scripted_turn() -> None:
    controller = TurnController(ScriptedAgentStream(delay_multiplier=0))
    session = controller.send("Which provinces would be under stress?")
    text = render_session(session, PLAIN)
    assert "[user]" in text and "[assistant]" in text
    assert "Visualizing Impact Zones" in text
    assert "Alberta: 0.78 Density Score #ef4444 [4 vertices]" in text


def test_fetch_boundary_overlay_returns_document() -> None:
    doc = {"type": "FeatureCollection", "features": []}
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=doc))
    assert fetch_boundary_overlay("http://geo.local/canada.geojson", transport=transport) == doc


def test_fetch_boundary_overlay_failures_are_silent() -> None:
    bad_json = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
    not_found = httpx.MockTransport(lambda request: httpx.Response(404))
    assert fetch_boundary_overlay("http://geo.local/x", transport=bad_json) is None
    assert fetch_boundary_overlay("http://geo.local/x", transport=not_found) is None
    assert fetch_boundary_overlay("") is None
