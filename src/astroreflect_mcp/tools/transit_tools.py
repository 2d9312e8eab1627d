"""Transit detection MCP tools.

Tools for finding transits over a date range, around a date, as a short
preview sample, and for resolving transit type ids to their kind.
"""

import json
from datetime import datetime
from typing import Any, Optional

from mcp.types import Tool, TextContent

from ..constants import Aspect, Planet, TransitSubtype, ZodiacSign
from ..models import Transit
from ..utils.ephemeris import EphemerisError
from ..utils.time_utils import parse_date
from ..utils.transit_types import create_transit_type, transit_type_from_id

# Longest range find_transits will sweep in one call
MAX_RANGE_DAYS = 366


# ============================================================================
# Tool Definitions
# ============================================================================

_DATE_PROPERTY = {
    "type": "string",
    "description": "ISO-8601 date or datetime, UTC (e.g. '2025-03-14' or '2025-03-14T18:00:00Z')"
}

_FORMAT_PROPERTY = {
    "type": "string",
    "enum": ["markdown", "json"],
    "description": "Output format (default: markdown)"
}


def get_transit_tools() -> list[Tool]:
    """Return list of transit tool definitions."""
    return [
        Tool(
            name="find_transits",
            description=(
                "Find every aspect, retrograde station and sign ingress between two dates. "
                "Results are deduplicated by transit type and ordered with currently active "
                "transits first, then by intensity.\n\n"
                "Optionally restrict the search to a subset of planets."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "start_date": _DATE_PROPERTY,
                    "end_date": _DATE_PROPERTY,
                    "planets": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Optional planet names (e.g. ['Sun', 'Mars']). Defaults to all ten."
                    },
                    "format": _FORMAT_PROPERTY,
                },
                "required": ["start_date", "end_date"]
            }
        ),
        Tool(
            name="get_current_transits",
            description=(
                "Get transits within a number of days either side of a date "
                "(defaults to now and the configured day range)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "date": _DATE_PROPERTY,
                    "day_range": {
                        "type": "number",
                        "description": "Days either side of the date (default: 3)"
                    },
                    "format": _FORMAT_PROPERTY,
                }
            }
        ),
        Tool(
            name="get_sample_transits",
            description=(
                "Get a short list of transits around a date for previews. "
                "Always returns results: padded with illustrative transits when few "
                "are found, and a fixed sample set if calculation fails."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "date": _DATE_PROPERTY,
                    "format": _FORMAT_PROPERTY,
                }
            }
        ),
        Tool(
            name="get_transit_type",
            description=(
                "Resolve a transit type. Pass 'id' (e.g. 'MARS_Square_SUN', 'MERCURY_RETROGRADE', "
                "'VENUS_INGRESS_Leo') to look up its kind, or pass planet_a with planet_b + aspect, "
                "or sign + subtype, to get the canonical id."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": "Transit type id to look up"},
                    "planet_a": {"type": "string", "description": "Primary planet"},
                    "planet_b": {"type": "string", "description": "Second planet (aspects only)"},
                    "aspect": {
                        "type": "string",
                        "enum": [a.value for a in Aspect],
                        "description": "Aspect (aspects only)"
                    },
                    "sign": {
                        "type": "string",
                        "enum": [s.value for s in ZodiacSign],
                        "description": "Zodiac sign (ingress / sign transit only)"
                    },
                    "subtype": {
                        "type": "string",
                        "enum": [s.value for s in TransitSubtype],
                        "description": "Transit subtype (default: Standard)"
                    },
                }
            }
        ),
    ]


# ============================================================================
# Formatting
# ============================================================================

def format_transit_report(transits: list[Transit], title: str) -> str:
    """
    Format transits into a readable markdown report.

    Args:
        transits: Classified, sorted transits
        title: Report heading

    Returns:
        Formatted string report
    """
    report = f"# {title}\n\n"

    if not transits:
        report += "No transits found.\n"
        return report

    report += f"Total Transits: {len(transits)}\n\n"

    for transit in transits:
        timing = transit.timing.value if transit.timing else "Unclassified"
        intensity = transit.intensity if transit.intensity is not None else 0.0

        report += f"## {transit.title}\n"
        report += f"  {timing} · intensity {intensity:.0f}/100\n"
        report += f"  Exact: {transit.exact_date.strftime('%Y-%m-%d %H:%M')} UTC\n"
        report += (
            f"  Window: {transit.start_date.strftime('%Y-%m-%d')} → "
            f"{transit.end_date.strftime('%Y-%m-%d')}\n"
        )
        report += f"  Type: `{transit.transit_type_id}`\n"
        report += f"  {transit.description}\n\n"

    return report


def _render(transits: list[Transit], title: str, arguments: dict) -> list[TextContent]:
    if arguments.get("format") == "json":
        payload = [t.to_dict() for t in transits]
        return [TextContent(type="text", text=json.dumps(payload, indent=2))]
    return [TextContent(type="text", text=format_transit_report(transits, title))]


def _parse_planets(names: Optional[list]) -> Optional[list[Planet]]:
    if names is None:
        return None
    if not isinstance(names, list):
        raise ValueError("planets must be a list of planet names")
    return [Planet.parse(n) for n in names]


def _optional_date(arguments: dict, key: str) -> Optional[datetime]:
    return parse_date(arguments.get(key))


# ============================================================================
# Tool Handlers
# ============================================================================

async def handle_find_transits(engine, arguments: dict) -> list[TextContent]:
    """Sweep a date range for transits."""
    if not arguments.get("start_date") or not arguments.get("end_date"):
        return [TextContent(type="text", text="Error: start_date and end_date are required")]

    try:
        start = parse_date(arguments["start_date"])
        end = parse_date(arguments["end_date"])
        planets = _parse_planets(arguments.get("planets"))
    except ValueError as e:
        return [TextContent(type="text", text=f"Error: {e}")]

    if (end - start).days > MAX_RANGE_DAYS:
        return [TextContent(type="text", text=f"Error: range cannot exceed {MAX_RANGE_DAYS} days")]

    try:
        transits = engine.find_transits_in_range(start, end, planets)
    except EphemerisError as e:
        return [TextContent(type="text", text=f"Ephemeris error: {e}")]
    except Exception as e:
        return [TextContent(type="text", text=f"Error: {e}")]

    title = f"Transits {start.strftime('%Y-%m-%d')} to {end.strftime('%Y-%m-%d')}"
    return _render(transits, title, arguments)


async def handle_get_current_transits(engine, arguments: dict, day_range: float) -> list[TextContent]:
    """Transits around a date (default now)."""
    try:
        center = _optional_date(arguments, "date")
        day_range = float(arguments.get("day_range", day_range))
    except (TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Error: {e}")]

    if day_range <= 0:
        return [TextContent(type="text", text="Error: day_range must be positive")]

    try:
        transits = engine.get_current_transits(center, day_range)
    except EphemerisError as e:
        return [TextContent(type="text", text=f"Ephemeris error: {e}")]
    except Exception as e:
        return [TextContent(type="text", text=f"Error: {e}")]

    label = center.strftime('%Y-%m-%d') if center else "now"
    return _render(transits, f"Current Transits ({label} ±{day_range:g} days)", arguments)


async def handle_get_sample_transits(engine, arguments: dict) -> list[TextContent]:
    """Preview sample; never empty."""
    try:
        date = _optional_date(arguments, "date")
    except ValueError as e:
        return [TextContent(type="text", text=f"Error: {e}")]

    transits = engine.get_sample_transits(date)
    return _render(transits, "Sample Transits", arguments)


async def handle_get_transit_type(arguments: dict) -> list[TextContent]:
    """Reverse lookup by id, or canonical id generation from parts."""
    type_id = (arguments.get("id") or "").strip()

    if type_id:
        transit_type = transit_type_from_id(type_id)
        if transit_type is None:
            return [TextContent(type="text", text=f"Error: unrecognized transit type id '{type_id}'")]
        return [TextContent(type="text", text=json.dumps(transit_type.to_dict(), indent=2))]

    if not arguments.get("planet_a"):
        return [TextContent(type="text", text="Error: either id or planet_a is required")]

    try:
        planet_a = Planet.parse(arguments["planet_a"])
        planet_b = Planet.parse(arguments["planet_b"]) if arguments.get("planet_b") else None
        aspect = Aspect.parse(arguments["aspect"]) if arguments.get("aspect") else None
        sign = ZodiacSign.parse(arguments["sign"]) if arguments.get("sign") else None
        subtype = TransitSubtype((arguments.get("subtype") or "Standard").strip().title())
        transit_type = create_transit_type(planet_a, planet_b, aspect, sign, subtype)
    except ValueError as e:
        # includes TransitTypeError for combinations with no id pattern
        return [TextContent(type="text", text=f"Error: {e}")]

    return [TextContent(type="text", text=json.dumps(transit_type.to_dict(), indent=2))]


# ============================================================================
# Tool name registry + dispatcher
# ============================================================================

TRANSIT_TOOL_NAMES = {
    "find_transits",
    "get_current_transits",
    "get_sample_transits",
    "get_transit_type",
}


async def handle_transit_tool(
    name: str, arguments: Any, engine, day_range: float = 3
) -> list[TextContent]:
    """Route transit tool calls to the appropriate handler."""
    arguments = arguments or {}
    if name == "find_transits":
        return await handle_find_transits(engine, arguments)
    elif name == "get_current_transits":
        return await handle_get_current_transits(engine, arguments, day_range)
    elif name == "get_sample_transits":
        return await handle_get_sample_transits(engine, arguments)
    elif name == "get_transit_type":
        return await handle_get_transit_type(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown transit tool: {name}")]
