"""Logging setup and stage events."""

from .logger import RunLogger, level_from_verbosity

__all__ = ["RunLogger", "level_from_verbosity"]
