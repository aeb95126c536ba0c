"""JSON encoding for document registration payloads.

Responsibilities:
- Wrap a document and its signature into the create-document request shape.
- Serialize payloads to deterministic compact UTF-8 JSON bytes.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from .models.datatypes import Document


def build_create_document_payload(document: Document, signature: str) -> dict[str, Any]:
    """Return the create-document request mapping for a signed document.

    Raises:
        ValueError: If the signature is empty.
    """

    if not isinstance(signature, str) or not signature.strip():
        raise ValueError("Document signature must be a non-empty string.")
    return {"description": document.to_payload(), "signature": signature}


def encode(payload: Mapping[str, Any]) -> bytes:
    """Serialize a payload mapping to compact JSON bytes, keeping key order."""

    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
