"""Boardroom: vote tally and completion engine for board resolutions and minutes."""

__version__ = "0.1.0"
