"""Literal scripts played by the scripted agent stream.

Each script is an ordered list of stream updates interleaved with `Pause`
steps. Pauses only pace playback; they never change what is emitted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from .domain_types import (
    ContentDelta,
    EventRecord,
    EventStatus,
    EventType,
    GeoLocation,
    GeoMarker,
    GeoPolygon,
    MapPatch,
    StreamUpdate,
)

DEMO_PROMPT_PROJECTED = "Get the projected population for each province and highlight top 3"
DEMO_PROMPT_EXPANSION = (
    "Based on the population expansion in future 3 years which provinces would be under stress"
)
DEMO_PROMPT_FACILITIES = "Show me the healthcare facilities in NWT"

DEMO_PROMPTS = (DEMO_PROMPT_PROJECTED, DEMO_PROMPT_EXPANSION, DEMO_PROMPT_FACILITIES)


@dataclass(frozen=True)
class Pause:
    ms: int


ScriptStep = Union[StreamUpdate, Pause]
Script = Sequence[ScriptStep]


def _event(type_: EventType, title: str, description: str, status: EventStatus) -> EventRecord:
    return EventRecord(type=type_, title=title, description=description, status=status)


def _tokens(text: str, pause_ms: int) -> list[ScriptStep]:
    """Split prose on single spaces so it arrives word by word."""
    steps: list[ScriptStep] = []
    for token in text.split(" "):
        steps.append(ContentDelta(text=token + " "))
        steps.append(Pause(pause_ms))
    return steps


PROJECTED_INTRO = (
    "Here are the **population projections** for the next 3 years by province. The map "
    "highlights the three most populous provinces (Ontario, Quebec, and British Columbia) "
    "which account for 75% of the total growth.\n\n"
)

PROJECTED_TABLE = """
| Province | Last (2021) | Projected (2027) | Growth Rate |
| :--- | :--- | :--- | :--- |
| **Ontario (ON)** | 14.22M | 15.10M | +6.2% |
| **Quebec (QC)** | 8.50M | 8.72M | +2.6% |
| **British Columbia (BC)** | 5.00M | 5.35M | +7.0% |
| Alberta (AB) | 4.26M | 4.60M | +8.0% |
| Manitoba (MB) | 1.34M | 1.41M | +5.2% |
| Saskatchewan (SK) | 1.13M | 1.18M | +4.4% |
| Nova Scotia (NS) | 0.97M | 1.01M | +4.1% |
| New Brunswick (NB) | 0.78M | 0.81M | +3.8% |
| Newfoundland (NL) | 0.51M | 0.52M | +2.0% |
| PEI (PE) | 0.15M | 0.16M | +6.7% |
| Territories | 0.12M | 0.13M | +8.3% |
"""

PROJECTED_POLYGONS = (
    GeoPolygon(
        coordinates=((49.0, -123.0), (54.0, -133.0), (60.0, -139.0), (60.0, -120.0), (49.0, -114.0), (49.0, -123.0)),
        color="#10b981",
        label="British Columbia (High Growth)",
    ),
    GeoPolygon(
        coordinates=((42.0, -83.0), (45.0, -74.0), (52.0, -79.0), (56.0, -88.0), (50.0, -95.0), (42.0, -83.0)),
        color="#3b82f6",
        label="Ontario (Highest Volume)",
    ),
    GeoPolygon(
        coordinates=((45.0, -74.0), (45.0, -71.0), (52.0, -57.0), (62.0, -70.0), (52.0, -79.0), (45.0, -74.0)),
        color="#8b5cf6",
        label="Quebec (Steady Growth)",
    ),
)


def projected_population_script() -> Script:
    return [
        _event(
            EventType.REASONING,
            "Querying Statistics",
            "Retrieving population projection models (2024-2027) for all provinces.",
            EventStatus.PENDING,
        ),
        Pause(1200),
        _event(
            EventType.TOOL_CALL,
            "BigQuery Agent",
            "Running: SELECT province, pop_2024, pop_2027_proj FROM `canada_census_projections_v2`",
            EventStatus.PENDING,
        ),
        Pause(2000),
        _event(EventType.TOOL_CALL, "BigQuery Agent", "Query completed. Returned 13 rows.", EventStatus.COMPLETED),
        Pause(500),
        MapPatch(center=GeoLocation(lat=55.0, lng=-90.0, zoom=3), markers=(), polygons=PROJECTED_POLYGONS),
        _event(
            EventType.MAP_UPDATE,
            "Regional Visualization",
            "Highlighting major population centers: Ontario, Quebec, and British Columbia.",
            EventStatus.COMPLETED,
        ),
        Pause(800),
        *_tokens(PROJECTED_INTRO, 30),
        ContentDelta(text=PROJECTED_TABLE),
        Pause(100),
    ]


FACILITIES_INTRO = (
    "Here are the key healthcare facilities located in the **Northwest Territories** "
    "found in the dataset:\n\n"
)

FACILITIES_TABLE = """
| Facility Name | Latitude | Longitude |
| :--- | :--- | :--- |
| **Fort Simpson Health Centre** | 61.86505 | -121.354 |
| **Fort Smith Health Centre** | 60.00356 | -111.880 |
| **H.H. Williams Memorial** | 60.81655 | -115.779 |
| **Inuvik Regional Hospital** | 68.35299 | -133.695 |
| **Stanton Regional Hospital** | 62.44756 | -114.404 |
| **Stanton Territorial Hospital** | 62.44768 | -114.405 |
"""

NWT_FACILITIES = (
    GeoMarker(position=(61.865, -121.354), title="Fort Simpson Health Centre"),
    GeoMarker(position=(60.003, -111.88), title="Fort Smith Health Centre"),
    GeoMarker(position=(60.816, -115.779), title="H.H. Williams Memorial Hospital"),
    GeoMarker(position=(68.353, -133.695), title="Inuvik Regional Hospital"),
    GeoMarker(position=(62.447, -114.404), title="Stanton Regional Hospital"),
    GeoMarker(position=(62.447, -114.405), title="Stanton Territorial Hospital"),
)


def healthcare_facilities_script() -> Script:
    return [
        _event(
            EventType.REASONING,
            "Analyzing Geography",
            "User requested facility locations. Converting region names to lat/lng bounds.",
            EventStatus.PENDING,
        ),
        Pause(1000),
        _event(
            EventType.TOOL_CALL,
            "BigQuery Agent",
            'Running: SELECT name, lat, lng FROM `health_care_facilities_ca` WHERE region IN ("AB", "NWT")',
            EventStatus.PENDING,
        ),
        Pause(1800),
        _event(
            EventType.TOOL_CALL,
            "BigQuery Agent",
            "Query execution successful. Found 6 matching records.",
            EventStatus.COMPLETED,
        ),
        Pause(500),
        # Map goes out before the prose so the markers appear first
        MapPatch(center=GeoLocation(lat=64.0, lng=-119.0, zoom=4), polygons=(), markers=NWT_FACILITIES),
        _event(
            EventType.MAP_UPDATE,
            "Rendering Markers",
            "Plotted 6 key facilities in Northwest Territories.",
            EventStatus.COMPLETED,
        ),
        Pause(600),
        *_tokens(FACILITIES_INTRO, 30),
        ContentDelta(text=FACILITIES_TABLE),
        Pause(100),
    ]


EXPANSION_PART_1 = (
    "Based on the projection analysis comparing population growth against current "
    "infrastructure capacity, **Alberta** and the **Northwest Territories** will be the "
    "most stressed regions. "
)

EXPANSION_PART_2 = (
    "The analysis reveals critically low facility density scores: **0.78** for Alberta and "
    "**0.07** for the Northwest Territories. These figures indicate a significant gap between "
    "projected population inflow and available service locations."
)

DENSITY_CHART_URL = (
    "https://quickchart.io/chart?c=%7Btype%3A%27bar%27%2Cdata%3A%7Blabels%3A%5B%27Alberta%27%2C"
    "%27NWT%27%5D%2Cdatasets%3A%5B%7Blabel%3A%27Facility%20Density%20Score%27%2Cdata%3A%5B0.78%2C"
    "0.07%5D%2CbackgroundColor%3A%5B%27%23ef4444%27%2C%27%23b91c1c%27%5D%7D%5D%7D%2Coptions%3A%7B"
    "legend%3A%7Bdisplay%3Afalse%7D%2Ctitle%3A%7Bdisplay%3Atrue%2Ctext%3A%27Healthcare%20Facility"
    "%20Density%20(Projected)%27%2CfontColor%3A%27%23cbd5e1%27%7D%2Cscales%3A%7ByAxes%3A%5B%7B"
    "ticks%3A%7BbeginAtZero%3Atrue%2CfontColor%3A%27%2394a3b8%27%7D%2CgridLines%3A%7Bcolor%3A"
    "%27rgba(255%2C255%2C255%2C0.1)%27%7D%7D%5D%2CxAxes%3A%5B%7Bticks%3A%7BfontColor%3A%27%2394a3b8"
    "%27%7D%2CgridLines%3A%7Bdisplay%3Afalse%7D%7D%5D%7D%7D%7D&w=400&h=200&bkg=transparent"
)

STRESS_POLYGONS = (
    GeoPolygon(
        # Alberta, SW -> NW -> NE -> SE
        coordinates=((49.0, -114.0), (60.0, -120.0), (60.0, -110.0), (49.0, -110.0)),
        color="#ef4444",
        label="Alberta: 0.78 Density Score",
    ),
    GeoPolygon(
        coordinates=((60.0, -120.0), (68.0, -136.0), (70.0, -130.0), (68.0, -102.0), (60.0, -102.0), (60.0, -110.0)),
        color="#b91c1c",
        label="NWT: 0.07 Density Score",
    ),
)


def population_stress_script() -> Script:
    return [
        _event(
            EventType.REASONING,
            "Decomposing Query",
            "Identifying required agents: Data Retrieval and Statistical Analysis.",
            EventStatus.PENDING,
        ),
        Pause(1200),
        _event(
            EventType.TOOL_CALL,
            "BigQuery Agent",
            'Checking schema for: "population_projections_v4" and "health_care_facilities_ca".',
            EventStatus.PENDING,
        ),
        Pause(1500),
        _event(
            EventType.TOOL_CALL,
            "BigQuery Agent",
            'Identified datasets: "population_projections_v4" and "health_care_facilities_ca".',
            EventStatus.COMPLETED,
        ),
        Pause(800),
        _event(
            EventType.TOOL_CALL,
            "DataScience Agent",
            "Calculated 2-year growth vs total healthcare facilities. Computing facility density scores.",
            EventStatus.PENDING,
        ),
        Pause(2500),
        _event(
            EventType.TOOL_CALL,
            "DataScience Agent",
            "Calculation complete. Identified anomalies in AB and NWT regions.",
            EventStatus.COMPLETED,
        ),
        Pause(500),
        *_tokens(EXPANSION_PART_1, 30),
        Pause(600),
        ContentDelta(text=f"\n\n![Healthcare Density Graph]({DENSITY_CHART_URL})\n\n"),
        Pause(1000),
        *_tokens(EXPANSION_PART_2, 30),
        MapPatch(center=GeoLocation(lat=60.0, lng=-115.0, zoom=3), markers=(), polygons=STRESS_POLYGONS),
        _event(
            EventType.MAP_UPDATE,
            "Visualizing Impact Zones",
            "Highlighting Alberta and NWT based on calculated stress indices.",
            EventStatus.COMPLETED,
        ),
    ]


FALLBACK_RESPONSE = (
    "I'm currently in demo mode. Try asking about:\n\n"
    "1. **Population expansion impact**\n"
    "2. **Healthcare facility locations**\n"
    "3. **Projected population stats**"
)


def fallback_script() -> Script:
    return _tokens(FALLBACK_RESPONSE, 20)
