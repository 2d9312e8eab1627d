#!/usr/bin/env python3
"""Entry point for astroreflect-mcp server."""

from astroreflect_mcp.server import run

if __name__ == "__main__":
    run()
