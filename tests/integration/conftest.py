"""Integration-test fixtures for deterministic CRPT endpoint behavior."""

from __future__ import annotations

import pytest


class _MockRequestsResponse:
    """Minimal requests response mock returned by the patched endpoint."""

    def __init__(self, *, payload: bytes, status_code: int) -> None:
        """Initialize response with payload bytes and status code."""

        self.content = payload
        self.status_code = status_code


class MockEndpoint:
    """Records posted requests and replies with a configurable status and body."""

    def __init__(self) -> None:
        """Initialize with a successful creation reply."""

        self.status_code = 200
        self.payload = b'{"value":"doc-created"}'
        self.calls: list[dict[str, object]] = []

    def post(self, url: str, **kwargs: object) -> _MockRequestsResponse:
        """Record one POST and return the configured reply."""

        self.calls.append({"url": url, **kwargs})
        return _MockRequestsResponse(payload=self.payload, status_code=self.status_code)


@pytest.fixture(autouse=True)
def crpt_endpoint(monkeypatch: pytest.MonkeyPatch) -> MockEndpoint:
    """Mock CRPT HTTP calls in integration tests to avoid network access."""

    endpoint = MockEndpoint()
    monkeypatch.setattr("crptapi.api.crpt_client.requests.post", endpoint.post)
    for key in (
        "CRPT_TIME_UNIT",
        "CRPT_REQUEST_LIMIT",
        "CRPT_BASE_URL",
        "CRPT_CREATE_PATH",
        "CRPT_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)
    return endpoint
