"""Crosscast: substitute a live stream from one platform into another platform's player."""

__version__ = "0.1.0"
