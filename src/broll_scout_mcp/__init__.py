"""B-roll scouting MCP server — Gemini-backed creative request aggregator."""

__version__ = "0.1.0"
