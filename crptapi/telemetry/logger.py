"""Structured request logging utilities.

Responsibilities:
- Emit concise, deterministic per-request logs for throttling and transport.
- Keep payloads and signatures out of log lines.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
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


class RequestLogger:
    """Emit deterministic event lines for throttled CRPT requests."""

    def __init__(self, sink: TextIO | None = None) -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stdout
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level="INFO", colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[crpt] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_admitted(self, waited_seconds: float) -> None:
        """Emit a throttle admission event with the time spent waiting."""

        self._emit("INFO", "admitted", "throttle", waited_seconds=f"{waited_seconds:.3f}")

    def log_request_start(self, endpoint: str) -> None:
        self._emit("INFO", "start", "request", endpoint=endpoint)

    def log_request_complete(self, status_code: int) -> None:
        self._emit("INFO", "complete", "request", status_code=status_code)

    def log_failure(self, stage: str, error_type: str) -> None:
        """Emit a failure event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)
