"""Telemetry and observability helpers.

This package emits deterministic request and throttling events.
"""

from .logger import RequestLogger

__all__ = ["RequestLogger"]
