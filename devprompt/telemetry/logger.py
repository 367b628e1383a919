"""Structured run logging utilities.

Responsibilities:
- Configure the single `loguru` sink used by the whole process.
- Emit concise, deterministic phase-level runtime logs.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", "\\"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def level_from_verbosity(verbosity: int, default_level: str = "WARNING") -> str:
    """Map repeated `-v` flags to a log level, falling back to the configured level."""

    if verbosity >= 2:
        return "DEBUG"
    if verbosity == 1:
        return "INFO"
    level = default_level.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(
            f"Unsupported log level `{default_level}`; supported: {', '.join(LOG_LEVELS)}."
        )
    return level


class RunLogger:
    """Own the loguru sink and emit phase logs for configure stages.

    Logs go to stderr by default; stdout belongs to the launched program.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "WARNING") -> None:
        """Replace loguru handlers with one plain-format sink at `level`."""

        self._sink = sink or sys.stderr
        self.level = level
        logger.remove()
        logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start runtime event."""

        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without the error payload."""

        self._emit("ERROR", "failure", stage, error_type=error_type)
