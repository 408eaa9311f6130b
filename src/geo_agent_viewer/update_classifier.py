"""Turn agent output payloads into typed stream updates."""
from __future__ import annotations

import json
from typing import Any, Callable, Mapping

from .domain_types import (
    ContentDelta,
    EventRecord,
    EventStatus,
    EventType,
    GeoLocation,
    GeoMarker,
    GeoPolygon,
    LatLng,
    MapPatch,
    StreamUpdate,
)
from .errors import DecodeError

__all__ = ["DEFAULT_ZOOM", "classify", "extract_parts", "is_map_tool", "map_patch_from_args"]

DEFAULT_ZOOM = 10
MAP_TOOL_KEYWORDS = ("map", "geo")

ToolPolicy = Callable[[str], bool]


def is_map_tool(name: str) -> bool:
    """Classify a function call as a map update by name substring."""
    lowered = name.lower()
    return any(keyword in lowered for keyword in MAP_TOOL_KEYWORDS)


def classify(payload: str, policy: ToolPolicy = is_map_tool) -> list[StreamUpdate]:
    """
    Parse one frame payload into stream updates.

    Args:
        payload: Frame payload (JSON text)
        policy: Decides whether a function call name is a map tool

    Returns:
        Updates in part order; empty for unrecognized shapes

    Raises:
        DecodeError: If the payload is not valid JSON
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise DecodeError(payload, exc.msg) from exc

    updates: list[StreamUpdate] = []
    for part in extract_parts(data):
        text = part.get("text")
        if isinstance(text, str) and text:
            updates.append(ContentDelta(text=text))

        call = part.get("functionCall")
        if isinstance(call, Mapping) and isinstance(call.get("name"), str):
            updates.extend(_function_call_updates(call["name"], call.get("args"), policy))
    return updates


def extract_parts(data: Any) -> list[Mapping[str, Any]]:
    """Return the parts list from `content.parts` or `candidates[0].content.parts`."""
    if not isinstance(data, Mapping):
        return []

    parts = _parts_of(data.get("content"))
    if parts is None:
        candidates = data.get("candidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], Mapping):
            parts = _parts_of(candidates[0].get("content"))

    return [p for p in parts or [] if isinstance(p, Mapping)]


def _parts_of(content: Any) -> list[Any] | None:
    if not isinstance(content, Mapping):
        return None
    parts = content.get("parts")
    return parts if isinstance(parts, list) else None


def _function_call_updates(name: str, args: Any, policy: ToolPolicy) -> list[StreamUpdate]:
    # A call that carried no args has no description
    description = json.dumps(args, separators=(",", ":")) if args is not None else None
    args = args if isinstance(args, Mapping) else {}
    is_map = policy(name)
    record = EventRecord(
        type=EventType.MAP_UPDATE if is_map else EventType.TOOL_CALL,
        title=f"Tool: {name}",
        description=description,
        status=EventStatus.COMPLETED,
    )
    if not is_map:
        return [record]

    patch = map_patch_from_args(args)
    if patch.is_empty():
        return [record]
    return [record, patch]


def map_patch_from_args(args: Mapping[str, Any]) -> MapPatch:
    """
    Derive a map patch from map tool arguments.

    Each field is set only when its source is present in `args`;
    an all-empty patch means the call carried nothing drawable.
    """
    center = None
    lat = _first_number(args, "lat", "latitude")
    lng = _first_number(args, "lng", "longitude")
    if lat is not None and lng is not None:
        zoom = _first_number(args, "zoom")
        center = GeoLocation(lat=lat, lng=lng, zoom=zoom if zoom is not None else DEFAULT_ZOOM)

    markers = None
    if isinstance(args.get("markers"), list):
        markers = tuple(
            marker for marker in (_marker(raw) for raw in args["markers"]) if marker is not None
        )

    polygons = None
    if isinstance(args.get("polygons"), list):
        polygons = tuple(
            polygon for polygon in (_polygon(raw) for raw in args["polygons"]) if polygon is not None
        )

    return MapPatch(center=center, markers=markers, polygons=polygons)


def _marker(raw: Any) -> GeoMarker | None:
    if not isinstance(raw, Mapping):
        return None
    position = _pair(raw.get("position"))
    if position is None:
        lat = _first_number(raw, "lat", "latitude")
        lng = _first_number(raw, "lng", "longitude")
        if lat is None or lng is None:
            return None
        position = (lat, lng)
    title = raw.get("title")
    return GeoMarker(position=position, title=str(title) if title else "Marker")


def _polygon(raw: Any) -> GeoPolygon | None:
    if not isinstance(raw, Mapping) or not isinstance(raw.get("coordinates"), list):
        return None
    ring = tuple(pair for pair in (_pair(c) for c in raw["coordinates"]) if pair is not None)
    return GeoPolygon(coordinates=ring, color=raw.get("color"), label=raw.get("label"))


def _pair(value: Any) -> LatLng | None:
    # Extra elements such as altitude are ignored
    if isinstance(value, (list, tuple)) and len(value) >= 2 and all(_is_number(v) for v in value[:2]):
        return (float(value[0]), float(value[1]))
    return None


def _first_number(source: Mapping[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = source.get(key)
        if _is_number(value):
            return float(value)
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
