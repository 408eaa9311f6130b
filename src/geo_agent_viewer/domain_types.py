from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence, Tuple, Union

LatLng = Tuple[float, float]


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class EventType(str, Enum):
    REASONING = "reasoning"
    TOOL_CALL = "tool_call"
    MAP_UPDATE = "map_update"
    ERROR = "error"


class EventStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TurnState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"


@dataclass(frozen=True)
class GeoLocation:
    lat: float
    lng: float
    zoom: float


@dataclass(frozen=True)
class GeoMarker:
    position: LatLng
    title: str


@dataclass(frozen=True)
class GeoPolygon:
    coordinates: Sequence[LatLng]
    color: str | None = None
    label: str | None = None


@dataclass(frozen=True)
class MapView:
    center: GeoLocation | None = None
    markers: Sequence[GeoMarker] | None = None
    polygons: Sequence[GeoPolygon] | None = None
    boundary_overlay: Any = None


@dataclass(frozen=True)
class AgentEvent:
    id: str
    type: EventType
    title: str
    description: str | None
    timestamp: float
    status: EventStatus


@dataclass(frozen=True)
class Message:
    id: str
    role: MessageRole
    content: str
    related_events: Sequence[AgentEvent] = ()


@dataclass(frozen=True)
class Session:
    session_id: str
    messages: Sequence[Message] = ()
    events: Sequence[AgentEvent] = ()
    map_view: MapView = field(default_factory=MapView)
    active_message_id: str | None = None
    turn_state: TurnState = TurnState.IDLE


@dataclass(frozen=True)
class ContentDelta:
    text: str


@dataclass(frozen=True)
class EventRecord:
    type: EventType
    title: str
    description: str | None
    status: EventStatus


@dataclass(frozen=True)
class MapPatch:
    center: GeoLocation | None = None
    markers: Sequence[GeoMarker] | None = None
    polygons: Sequence[GeoPolygon] | None = None

    def is_empty(self) -> bool:
        return self.center is None and self.markers is None and self.polygons is None


StreamUpdate = Union[ContentDelta, EventRecord, MapPatch]
