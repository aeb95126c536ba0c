"""Unit tests for the throttled CRPT client and its requests transport."""

from __future__ import annotations

import io
import json

import pytest
import requests

from crptapi.api.crpt_client import CrptApi, CrptApiError, RequestsTransport
from crptapi.config import CrptApiConfig
from crptapi.encoding import build_create_document_payload, encode
from crptapi.errors import AcquireCancelledError
from crptapi.models.datatypes import ApiRequest, ApiResponse, sample_document
from crptapi.telemetry.logger import RequestLogger
from crptapi.throttle.cancellation import CancellationToken
from crptapi.throttle.gate import AdmissionGate


class _MockRequestsResponse:
    """Minimal requests response mock used by transport tests."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        """Initialize response with payload bytes and status code."""

        self.content = payload
        self.status_code = status_code


class _RecordingTransport:
    """Transport test double that records requests and returns a fixed response."""

    def __init__(self, response: ApiResponse | None = None) -> None:
        """Initialize recording storage and canned response."""

        self.requests: list[ApiRequest] = []
        self.response = response or ApiResponse(status_code=200, body='{"value":"ok"}')

    def send(self, request: ApiRequest) -> ApiResponse:
        """Record the request without network access."""

        self.requests.append(request)
        return self.response


class _RecordingGate:
    """Gate test double that records acquire arguments without blocking."""

    def __init__(self) -> None:
        """Initialize recording storage."""

        self.calls: list[tuple[object, object]] = []

    def acquire(self, cancel_token: object = None, timeout: object = None) -> None:
        """Record one admission request."""

        self.calls.append((cancel_token, timeout))


def test_create_document_posts_encoded_body_to_endpoint() -> None:
    """Client should send the signed document as JSON to the create endpoint."""

    transport = _RecordingTransport()
    client = CrptApi("seconds", 5, transport=transport)
    document = sample_document()

    response = client.create_document(document, "signature_example")

    assert response.body == '{"value":"ok"}'
    [request] = transport.requests
    assert request.url == "https://ismp.crpt.ru/api/v3/lk/documents/create"
    assert request.headers == {"Content-Type": "application/json"}
    assert request.body == encode(build_create_document_payload(document, "signature_example"))


def test_create_document_acquires_gate_once_per_request() -> None:
    """Each document request should pass its cancellation options to the gate."""

    gate = _RecordingGate()
    token = CancellationToken()
    client = CrptApi(gate=gate, transport=_RecordingTransport())  # type: ignore[arg-type]

    client.create_document(sample_document(), "sig")
    client.create_document(sample_document(), "sig", cancel_token=token, acquire_timeout=2.5)

    assert gate.calls == [(None, None), (token, 2.5)]


def test_create_document_rejects_blank_signature_before_throttling() -> None:
    """Invalid signatures should fail without consuming a rate-limit permit."""

    gate = _RecordingGate()
    transport = _RecordingTransport()
    client = CrptApi(gate=gate, transport=transport)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="signature"):
        client.create_document(sample_document(), "")

    assert gate.calls == []
    assert transport.requests == []


def test_client_shares_one_gate_across_requests() -> None:
    """Requests beyond the limit should be refused when the caller will not wait."""

    transport = _RecordingTransport()
    client = CrptApi("minutes", 2, transport=transport)

    client.create_document(sample_document(), "sig", acquire_timeout=0)
    client.create_document(sample_document(), "sig", acquire_timeout=0)
    with pytest.raises(AcquireCancelledError) as exc_info:
        client.create_document(sample_document(), "sig", acquire_timeout=0)

    assert exc_info.value.reason == "deadline"
    assert len(transport.requests) == 2


def test_client_logs_admission_and_request_events() -> None:
    """Logger should receive throttle and request events without payload data."""

    sink = io.StringIO()
    client = CrptApi(
        transport=_RecordingTransport(ApiResponse(status_code=201, body="{}")),
        logger=RequestLogger(sink=sink),
    )

    client.create_document(sample_document(), "secret-signature")

    lines = sink.getvalue().splitlines()
    assert lines[0].startswith("[crpt] level=INFO stage=throttle event=admitted waited_seconds=")
    assert lines[1] == (
        "[crpt] level=INFO stage=request event=start "
        "endpoint=https://ismp.crpt.ru/api/v3/lk/documents/create"
    )
    assert lines[2] == "[crpt] level=INFO stage=request event=complete status_code=201"
    assert "secret-signature" not in sink.getvalue()


def test_client_logs_throttle_failure() -> None:
    """Refused admissions should be logged as throttle failures."""

    sink = io.StringIO()
    gate = AdmissionGate(60.0, 1)
    gate.acquire()
    client = CrptApi(gate=gate, transport=_RecordingTransport(), logger=RequestLogger(sink=sink))

    with pytest.raises(AcquireCancelledError):
        client.create_document(sample_document(), "sig", acquire_timeout=0)

    assert sink.getvalue().strip() == (
        "[crpt] level=ERROR stage=throttle event=failure error_type=AcquireCancelledError"
    )


def test_client_from_config_uses_endpoint_and_limit() -> None:
    """Config-built clients should honor base URL, path, and request limit."""

    config = CrptApiConfig(
        time_unit="hours",
        request_limit=3,
        base_url="http://localhost:8080/",
        create_path="/documents",
    )

    client = CrptApi.from_config(config, transport=_RecordingTransport())

    assert client.endpoint == "http://localhost:8080/documents"
    assert client.gate.capacity == 3
    assert client.gate.window_seconds == 3600.0


def test_requests_transport_returns_http_error_status(monkeypatch: pytest.MonkeyPatch) -> None:
    """HTTP error statuses should be returned as responses, not raised."""

    captured: dict[str, object] = {}

    def _mock_post(url: str, **kwargs: object) -> _MockRequestsResponse:
        """Capture request arguments and return a validation failure."""

        captured["url"] = url
        captured.update(kwargs)
        return _MockRequestsResponse(status_code=400, payload=b'{"error":"bad inn"}')

    monkeypatch.setattr("crptapi.api.crpt_client.requests.post", _mock_post)
    transport = RequestsTransport(timeout_seconds=4.0)

    response = transport.send(
        ApiRequest(url="https://example.test/x", headers={"A": "b"}, body=b"{}")
    )

    assert response == ApiResponse(status_code=400, body='{"error":"bad inn"}')
    assert captured == {
        "url": "https://example.test/x",
        "headers": {"A": "b"},
        "data": b"{}",
        "timeout": 4.0,
    }


@pytest.mark.parametrize(
    ("raised", "failure_kind", "message"),
    [
        (requests.Timeout("read timed out"), "timeout", "CRPT request timed out."),
        (
            requests.ConnectionError("refused Bearer abcdefghijklmnop"),
            "transport",
            "CRPT request transport error: refused Bearer [redacted-token]",
        ),
        (TimeoutError("socket"), "timeout", "CRPT request timed out."),
    ],
)
def test_requests_transport_maps_network_failures(
    monkeypatch: pytest.MonkeyPatch,
    raised: Exception,
    failure_kind: str,
    message: str,
) -> None:
    """Network-layer failures should map to classified client errors."""

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Raise the parametrized network failure."""

        raise raised

    monkeypatch.setattr("crptapi.api.crpt_client.requests.post", _mock_post)

    with pytest.raises(CrptApiError) as exc_info:
        RequestsTransport().send(ApiRequest(url="https://example.test", headers={}, body=b""))

    assert exc_info.value.failure_kind == failure_kind
    assert str(exc_info.value) == message


def test_requests_transport_caps_long_error_messages() -> None:
    """Transport error details should be compacted and length-capped."""

    message = RequestsTransport._short_message("word   " * 100)

    assert len(message) == 180
    assert message.endswith("...")
    assert "  " not in message


def test_end_to_end_body_is_valid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    """The default transport should receive a JSON body carrying the signature."""

    bodies: list[bytes] = []

    def _mock_post(_url: str, **kwargs: object) -> _MockRequestsResponse:
        """Capture the body and acknowledge creation."""

        bodies.append(kwargs["data"])  # type: ignore[arg-type]
        return _MockRequestsResponse(status_code=200, payload=b'{"value":"created"}')

    monkeypatch.setattr("crptapi.api.crpt_client.requests.post", _mock_post)

    response = CrptApi().create_document(sample_document(), "signature_example")

    assert response.ok
    assert json.loads(bodies[0])["signature"] == "signature_example"
