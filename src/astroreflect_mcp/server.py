"""MCP server for astroreflect-mcp."""

import asyncio
import json
import logging
import sys
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Tool, TextContent

from .config import ConfigManager
from .constants import Planet
from .utils.ephemeris import EphemerisEngine, EphemerisError
from .utils.time_utils import parse_date, utc_now
from .utils.transit_engine import TransitEngine
from .tools.transit_tools import (
    get_transit_tools,
    handle_transit_tool,
    TRANSIT_TOOL_NAMES,
)

logger = logging.getLogger(__name__)

# Initialize MCP server
app = Server("astroreflect-mcp")

# Global state
config: Optional[ConfigManager] = None
ephemeris: Optional[EphemerisEngine] = None
transit_engine: Optional[TransitEngine] = None


def init_config() -> ConfigManager:
    """Initialize configuration (lazy singleton)."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def init_ephemeris() -> EphemerisEngine:
    """Initialize the ephemeris engine (lazy singleton)."""
    global ephemeris
    if ephemeris is None:
        ephemeris = EphemerisEngine(ephe_path=init_config().get_ephemeris_path())
    return ephemeris


def init_transit_engine() -> TransitEngine:
    """Initialize the transit engine on top of the ephemeris (lazy singleton)."""
    global transit_engine
    if transit_engine is None:
        cfg = init_config()
        transit_engine = TransitEngine(
            init_ephemeris(),
            steps=cfg.get_search_steps(),
            active_window_days=cfg.get_day_range("active_window_days"),
            sample_day_range=cfg.get_day_range("sample_day_range"),
        )
    return transit_engine


def reset_engines() -> None:
    """Drop the engine singletons so the next call rebuilds them from config."""
    global ephemeris, transit_engine
    ephemeris = None
    transit_engine = None


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools."""
    # Core tools
    core_tools = [
        Tool(
            name="check_ephemeris",
            description=(
                "Check the current ephemeris mode and precision level. "
                "Reports whether the built-in Moshier ephemeris (~1 arcminute) or "
                "Swiss Ephemeris data files (~0.001 arcsecond) are active, "
                "and shows the pysweph version."
            ),
            inputSchema={
                "type": "object",
                "properties": {},
            }
        ),
        Tool(
            name="view_config",
            description="View current transit engine configuration",
            inputSchema={
                "type": "object",
                "properties": {},
            }
        ),
        Tool(
            name="update_config",
            description=(
                "Change transit engine settings. Only the given keys are updated; "
                "the new values are saved to the config file and apply to the next call."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "ephemeris_path": {
                        "type": ["string", "null"],
                        "description": "Directory with Swiss Ephemeris .se1 files; empty or null for Moshier"
                    },
                    "search_steps": {
                        "type": "integer",
                        "description": "Grid resolution for exact-moment and station searches (1-1000)"
                    },
                    "active_window_days": {
                        "type": "number",
                        "description": "Half-width in days of the search around an aspect active now"
                    },
                    "current_day_range": {
                        "type": "number",
                        "description": "Default day range for get_current_transits"
                    },
                    "sample_day_range": {
                        "type": "number",
                        "description": "Day range used by get_sample_transits"
                    },
                    "log_level": {
                        "type": "string",
                        "enum": list(ConfigManager.VALID_LOG_LEVELS),
                        "description": "Server log level"
                    }
                }
            }
        ),
        Tool(
            name="get_planet_position",
            description=(
                "Get a planet's ecliptic longitude, speed, zodiac sign and retrograde "
                "status at a moment (defaults to now)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "planet": {
                        "type": "string",
                        "description": "Planet name (e.g. 'Mars')"
                    },
                    "date": {
                        "type": "string",
                        "description": "ISO-8601 date or datetime, UTC (optional, defaults to now)"
                    }
                },
                "required": ["planet"]
            }
        ),
    ]

    return core_tools + get_transit_tools()


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}

    if name == "check_ephemeris":
        import swisseph as swe
        engine = init_ephemeris()
        mode = engine.get_mode()

        lines = [
            f"Ephemeris mode: {mode}",
            f"pysweph version: {swe.__version__}",
        ]
        if mode == "moshier":
            lines.append("Precision: ~1 arcminute (Moshier built-in, no files needed)")
            lines.append("Set SE_EPHE_PATH or ephemeris_path in the config to use .se1 files.")
        else:
            lines.append("Precision: ~0.001 arcsecond (Swiss Ephemeris files)")
            lines.append(f"Ephemeris path: {engine.ephe_path}")

        return [TextContent(type="text", text="\n".join(lines))]

    elif name == "view_config":
        try:
            status = init_config().get_config_status()
            return [TextContent(type="text", text=json.dumps(status, indent=2))]
        except Exception as e:
            return [TextContent(type="text", text=f"Error: {e}")]

    elif name == "update_config":
        cfg = init_config()
        # Engines are rebuilt from whatever was saved, even on a partial update
        reset_engines()
        try:
            if "ephemeris_path" in arguments:
                cfg.set_ephemeris_path(arguments["ephemeris_path"] or None)
            if "search_steps" in arguments:
                cfg.set_search_steps(int(arguments["search_steps"]))
            for key in ConfigManager.DAY_RANGE_KEYS:
                if key in arguments:
                    cfg.set_day_range(key, float(arguments[key]))
            if "log_level" in arguments:
                cfg.set_log_level(str(arguments["log_level"]))
                logging.getLogger().setLevel(cfg.get_log_level())
        except (TypeError, ValueError) as e:
            return [TextContent(type="text", text=f"Error: {e}")]

        status = cfg.get_config_status()
        return [TextContent(type="text", text="Configuration updated.\n\n" + json.dumps(status, indent=2))]

    elif name == "get_planet_position":
        try:
            if not arguments.get("planet"):
                return [TextContent(type="text", text="Error: 'planet' is required.")]

            planet = Planet.parse(arguments["planet"])
            moment = parse_date(arguments.get("date")) or utc_now()
            info = init_ephemeris().describe_position(planet, moment)

            retro = " ℞" if info["is_retrograde"] else ""
            response = (
                f"# {planet.display_name}{retro}\n\n"
                f"**Moment:** {info['moment'].strftime('%Y-%m-%d %H:%M')} UTC\n"
                f"**Position:** {info['formatted']} {info['sign'].value}\n"
                f"**Longitude:** {info['longitude']:.4f}°\n"
                f"**Speed:** {info['speed']:+.4f}°/day\n"
                f"**Sign ruler:** {info['ruler'].display_name} ({info['element']})\n"
                f"**Through sign:** {info['percent_in_sign']:.1f}%\n"
            )
            return [TextContent(type="text", text=response)]

        except EphemerisError as e:
            return [TextContent(type="text", text=f"Ephemeris error: {e}")]
        except Exception as e:
            return [TextContent(type="text", text=f"Error: {e}")]

    # Transit tools
    elif name in TRANSIT_TOOL_NAMES:
        cfg = init_config()
        engine = init_transit_engine()
        return await handle_transit_tool(
            name, arguments, engine, day_range=cfg.get_day_range("current_day_range")
        )

    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


def configure_logging(level: int) -> None:
    """Send log records to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def main():
    """Run the MCP server."""
    from mcp.server.stdio import stdio_server

    configure_logging(init_config().get_log_level())
    logger.info("Starting astroreflect-mcp (%s ephemeris)", init_ephemeris().get_mode())

    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
