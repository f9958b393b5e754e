"""FastMCP sub-servers exposing the aggregator operations."""
