"""Shared pytest fixtures for the full crptapi test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from crptapi.models.datatypes import sample_document


@pytest.fixture
def sample_document_path(tmp_path: Path) -> Path:
    """Write the sample document in wire format and return its path."""

    path = tmp_path / "document.json"
    path.write_text(json.dumps(sample_document().to_payload()), encoding="utf-8")
    return path
