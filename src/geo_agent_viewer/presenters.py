from __future__ import annotations

from typing import Any, Iterable

from .ansi_colors import ColorMode, FG_GREEN, style
from .domain_types import GeoLocation, MapView, Message, MessageRole, Session
from .timeline_presenter import render_timeline

DEFAULT_MAP_CENTER = GeoLocation(lat=56.1304, lng=-106.3468, zoom=4)


def render_transcript(messages: Iterable[Message]) -> str:
    lines = []
    for msg in messages:
        lines.append(f"[{msg.role.value}]")
        lines.append(msg.content.strip() if msg.content.strip() else "(no content)")
        if msg.role is MessageRole.ASSISTANT and msg.related_events:
            lines.append(f"  ({len(msg.related_events)} agent events)")
        lines.append("")
    return "\n".join(lines).rstrip()


def render_map_view(view: MapView) -> str:
    center = view.center or DEFAULT_MAP_CENTER
    suffix = "" if view.center else " (default)"
    lines = [f"Center: lat={center.lat} lng={center.lng} zoom={center.zoom}{suffix}"]

    markers = view.markers or ()
    lines.append(f"Markers: {len(markers)}")
    for marker in markers:
        lat, lng = marker.position
        lines.append(f"  - {marker.title} ({lat}, {lng})")

    polygons = view.polygons or ()
    lines.append(f"Polygons: {len(polygons)}")
    for polygon in polygons:
        label = polygon.label or "(unlabelled)"
        color = f" {polygon.color}" if polygon.color else ""
        lines.append(f"  - {label}{color} [{len(polygon.coordinates)} vertices]")

    lines.append(f"Boundary overlay: {_describe_overlay(view.boundary_overlay)}")
    return "\n".join(lines)


def render_session(session: Session, mode: ColorMode) -> str:
    def heading(title: str) -> str:
        return style(f"== {title} ==", mode=mode, fg=FG_GREEN, bold=True)

    return "\n".join(
        [
            heading(f"Transcript ({session.session_id})"),
            render_transcript(session.messages),
            "",
            heading("Agent timeline"),
            render_timeline(session.events, mode),
            "",
            heading("Map view"),
            render_map_view(session.map_view),
        ]
    )


def _describe_overlay(overlay: Any) -> str:
    if overlay is None:
        return "not loaded"
    if isinstance(overlay, dict) and isinstance(overlay.get("features"), list):
        return f"{len(overlay['features'])} features"
    return "loaded"
