"""Moderation & trust enforcement engine."""

__version__ = "1.0.0"
