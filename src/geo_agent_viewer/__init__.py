from .agent_stream import AgentStream
from .domain_types import (
    AgentEvent,
    ContentDelta,
    EventRecord,
    EventStatus,
    EventType,
    GeoLocation,
    GeoMarker,
    GeoPolygon,
    MapPatch,
    MapView,
    Message,
    MessageRole,
    Session,
    StreamUpdate,
    TurnState,
)
from .errors import CollaboratorError, DecodeError, TransportError, TurnInProgressError, ViewerError
from .frame_decoder import FrameDecoder
from .http_agent_stream import HttpAgentStream
from .scripted_agent_stream import ScriptedAgentStream
from .session_reducer import reduce
from .turn_controller import TurnController
from .update_classifier import classify, is_map_tool

__all__ = [
    "AgentEvent",
    "AgentStream",
    "CollaboratorError",
    "ContentDelta",
    "DecodeError",
    "EventRecord",
    "EventStatus",
    "EventType",
    "FrameDecoder",
    "GeoLocation",
    "GeoMarker",
    "GeoPolygon",
    "HttpAgentStream",
    "MapPatch",
    "MapView",
    "Message",
    "MessageRole",
    "ScriptedAgentStream",
    "Session",
    "StreamUpdate",
    "TransportError",
    "TurnController",
    "TurnInProgressError",
    "TurnState",
    "ViewerError",
    "classify",
    "is_map_tool",
    "reduce",
]
