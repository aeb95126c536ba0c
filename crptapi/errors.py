"""Domain exceptions for throttling, configuration, and CLI diagnostics."""

from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """Raised when a gate or client is configured with unusable values."""


class AcquireCancelledError(RuntimeError):
    """Raised when a caller stops waiting for an admission permit.

    The `reason` attribute is `"cancelled"` for an external cancellation signal
    and `"deadline"` when the caller's timeout elapsed first. No permit is
    consumed in either case.
    """

    def __init__(self, message: str, *, reason: str = "cancelled") -> None:
        """Initialize the cancellation error with its reason."""

        super().__init__(message)
        self.reason = reason


class CommandStageError(RuntimeError):
    """Raised when a specific CLI command stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
