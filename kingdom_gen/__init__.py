"""Dominion kingdom setup generator: selection trees, request building and setup display."""

__all__ = []
