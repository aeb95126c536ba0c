"""CRPT HTTP client for throttled document registration.

Responsibilities:
- Send create-document requests to the CRPT REST API.
- Pass every request through one shared `AdmissionGate`.
- Raise actionable transport exceptions for CLI-level error mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
import socket
from time import monotonic
from typing import Any, Protocol

import requests

from ..config import (
    DEFAULT_BASE_URL,
    DEFAULT_CREATE_PATH,
    DEFAULT_REQUEST_LIMIT,
    DEFAULT_TIMEOUT_SECONDS,
    CrptApiConfig,
)
from ..encoding import build_create_document_payload, encode
from ..models.datatypes import ApiRequest, ApiResponse, Document
from ..telemetry.logger import RequestLogger
from ..throttle.cancellation import CancellationToken
from ..throttle.gate import AdmissionGate
from ..throttle.units import TimeUnit


class CrptApiError(RuntimeError):
    """Raised when a CRPT request cannot be delivered or answered."""

    def __init__(self, message: str, *, failure_kind: str = "unknown") -> None:
        """Initialize transport error metadata for diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind


class Transport(Protocol):
    """Sends one encoded request and returns the raw HTTP outcome."""

    def send(self, request: ApiRequest) -> ApiResponse: ...


@dataclass(slots=True)
class RequestsTransport:
    """Minimal requests-based transport; HTTP error statuses are returned, not raised."""

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    _MAX_MESSAGE_CHARS = 180

    def send(self, request: ApiRequest) -> ApiResponse:
        """POST the request body and return the status code and decoded body."""

        try:
            response = requests.post(
                request.url,
                headers=dict(request.headers),
                data=request.body,
                timeout=self.timeout_seconds,
            )
            body = bytes(response.content).decode("utf-8", errors="replace")
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "CRPT request timed out."
            else:
                detail = f"CRPT request transport error: {self._short_message(str(exc))}"
            raise CrptApiError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise CrptApiError("CRPT request timed out.", failure_kind="timeout") from exc
        return ApiResponse(status_code=int(response.status_code), body=body)

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Redact bearer tokens, normalize whitespace, and cap message length."""

        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            text,
        )
        compact = " ".join(redacted.split())
        if len(compact) <= cls._MAX_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_MESSAGE_CHARS - 3]}..."


class CrptApi:
    """Thread-safe CRPT client limited to `request_limit` calls per `time_unit`.

    All threads sharing one instance share one admission gate, so the limit
    holds across the whole process for that instance.
    """

    def __init__(
        self,
        time_unit: TimeUnit | str = TimeUnit.SECONDS,
        request_limit: int = DEFAULT_REQUEST_LIMIT,
        *,
        base_url: str = DEFAULT_BASE_URL,
        create_path: str = DEFAULT_CREATE_PATH,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Transport | None = None,
        gate: AdmissionGate | None = None,
        logger: RequestLogger | None = None,
    ) -> None:
        """Initialize client settings, transport, and the shared admission gate.

        Raises:
            InvalidConfigurationError: If the unit or request limit is invalid.
        """

        self.gate = gate if gate is not None else AdmissionGate.for_time_unit(
            time_unit, request_limit
        )
        self.endpoint = f"{base_url.rstrip('/')}/{create_path.lstrip('/')}"
        self.transport = (
            transport if transport is not None else RequestsTransport(timeout_seconds)
        )
        self.logger = logger

    @classmethod
    def from_config(cls, config: CrptApiConfig, **kwargs: Any) -> CrptApi:
        """Create a client from a validated `CrptApiConfig`."""

        config.validate()
        return cls(
            config.time_unit,
            config.request_limit,
            base_url=config.base_url,
            create_path=config.create_path,
            timeout_seconds=config.timeout_seconds,
            **kwargs,
        )

    def create_document(
        self,
        document: Document,
        signature: str,
        *,
        cancel_token: CancellationToken | None = None,
        acquire_timeout: float | None = None,
    ) -> ApiResponse:
        """Register a signed document, waiting for an admission permit first.

        Raises:
            AcquireCancelledError: If the admission wait is cancelled or times out.
            CrptApiError: If the request cannot be delivered.
            ValueError: If the signature is empty.
        """

        payload = build_create_document_payload(document, signature)
        body = encode(payload)

        started_at = monotonic()
        try:
            self.gate.acquire(cancel_token=cancel_token, timeout=acquire_timeout)
        except Exception as exc:
            self._log_failure("throttle", exc)
            raise
        if self.logger is not None:
            self.logger.log_admitted(monotonic() - started_at)

        request = ApiRequest(
            url=self.endpoint,
            headers={"Content-Type": "application/json"},
            body=body,
        )
        if self.logger is not None:
            self.logger.log_request_start(self.endpoint)
        try:
            response = self.transport.send(request)
        except Exception as exc:
            self._log_failure("request", exc)
            raise
        if self.logger is not None:
            self.logger.log_request_complete(response.status_code)
        return response

    def _log_failure(self, stage: str, exc: Exception) -> None:
        """Record a failure event when a logger is attached."""

        if self.logger is not None:
            self.logger.log_failure(stage, type(exc).__name__)
