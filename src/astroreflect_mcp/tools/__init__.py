"""Transit tools for MCP server."""

from .transit_tools import (
    format_transit_report,
    get_transit_tools,
    handle_transit_tool,
    TRANSIT_TOOL_NAMES,
)

__all__ = [
    'format_transit_report',
    'get_transit_tools',
    'handle_transit_tool',
    'TRANSIT_TOOL_NAMES',
]
