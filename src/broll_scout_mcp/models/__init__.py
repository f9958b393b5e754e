"""Pydantic models for queries, aggregates, and generated media."""
