"""Core data types for CRPT document registration.

Responsibilities:
- Define the fixed "introduce goods" document schema.
- Map schema fields to and from their wire names.
- Describe transport-level requests and responses.

Key types:
- `Document`, `Description`, `Product`: document schema sent for registration.
- `ApiRequest`, `ApiResponse`: transport-neutral HTTP exchange records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

_DEFAULT_DOC_TYPE = "LP_INTRODUCE_GOODS"

_PRODUCT_FIELDS = (
    "certificate_document",
    "certificate_document_date",
    "certificate_document_number",
    "owner_inn",
    "producer_inn",
    "production_date",
    "tnved_code",
    "uit_code",
    "uitu_code",
)

_DOCUMENT_STRING_FIELDS = (
    "doc_id",
    "doc_status",
    "doc_type",
    "owner_inn",
    "participant_inn",
    "producer_inn",
    "production_date",
    "production_type",
    "reg_date",
    "reg_number",
)

_DOCUMENT_WIRE_KEYS = frozenset(
    {"description", "importRequest", "products", *_DOCUMENT_STRING_FIELDS}
)


def _optional_string(payload: Mapping[str, Any], key: str, label: str) -> str | None:
    """Read an optional string field, rejecting non-string values."""

    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{label} field `{key}` must be a string or null.")
    return value


def _reject_unknown_keys(payload: Mapping[str, Any], allowed: frozenset[str], label: str) -> None:
    """Raise when a wire mapping carries keys outside the schema."""

    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"{label} has unsupported key(s): {', '.join(unknown)}")


@dataclass(slots=True)
class Description:
    """Document description block.

    Attributes:
        participant_inn: Taxpayer number of the participant (`participantInn`).
    """

    participant_inn: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the wire mapping for this description."""

        return {"participantInn": self.participant_inn}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Description:
        """Parse a description from its wire mapping."""

        _reject_unknown_keys(payload, frozenset({"participantInn"}), "Description")
        return cls(participant_inn=_optional_string(payload, "participantInn", "Description"))


@dataclass(slots=True)
class Product:
    """One product line of an introduce-goods document."""

    certificate_document: str | None = None
    certificate_document_date: str | None = None
    certificate_document_number: str | None = None
    owner_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    tnved_code: str | None = None
    uit_code: str | None = None
    uitu_code: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the wire mapping for this product in schema field order."""

        return {name: getattr(self, name) for name in _PRODUCT_FIELDS}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Product:
        """Parse a product from its wire mapping."""

        _reject_unknown_keys(payload, frozenset(_PRODUCT_FIELDS), "Product")
        return cls(**{name: _optional_string(payload, name, "Product") for name in _PRODUCT_FIELDS})


@dataclass(slots=True)
class Document:
    """Introduce-goods document submitted to the registration endpoint.

    Attributes:
        description: Optional description block with the participant INN.
        doc_id: Caller-assigned document identifier.
        doc_status: Document status, for example `NEW`.
        doc_type: Document type, fixed to `LP_INTRODUCE_GOODS` by default.
        import_request: Import flag, serialized as `importRequest`.
        owner_inn: Owner taxpayer number.
        participant_inn: Participant taxpayer number.
        producer_inn: Producer taxpayer number.
        production_date: Production date (`YYYY-MM-DD`).
        production_type: Production type label.
        products: Product lines.
        reg_date: Registration date (`YYYY-MM-DD`).
        reg_number: Registration number.
    """

    description: Description | None = None
    doc_id: str | None = None
    doc_status: str | None = None
    doc_type: str = _DEFAULT_DOC_TYPE
    import_request: bool = True
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    production_type: str | None = None
    products: list[Product] = field(default_factory=list)
    reg_date: str | None = None
    reg_number: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the wire mapping for this document in schema field order."""

        return {
            "description": self.description.to_payload() if self.description else None,
            "doc_id": self.doc_id,
            "doc_status": self.doc_status,
            "doc_type": self.doc_type,
            "importRequest": self.import_request,
            "owner_inn": self.owner_inn,
            "participant_inn": self.participant_inn,
            "producer_inn": self.producer_inn,
            "production_date": self.production_date,
            "production_type": self.production_type,
            "products": [product.to_payload() for product in self.products],
            "reg_date": self.reg_date,
            "reg_number": self.reg_number,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Document:
        """Parse a document from its wire mapping.

        Raises:
            ValueError: If the mapping has unknown keys or mistyped values.
        """

        if not isinstance(payload, Mapping):
            raise ValueError("Document payload must be a JSON object.")
        _reject_unknown_keys(payload, _DOCUMENT_WIRE_KEYS, "Document")

        description_payload = payload.get("description")
        description: Description | None = None
        if description_payload is not None:
            if not isinstance(description_payload, Mapping):
                raise ValueError("Document field `description` must be an object or null.")
            description = Description.from_payload(description_payload)

        products_payload = payload.get("products") or []
        if not isinstance(products_payload, list):
            raise ValueError("Document field `products` must be a list.")
        products: list[Product] = []
        for item in products_payload:
            if not isinstance(item, Mapping):
                raise ValueError("Document field `products` must contain objects.")
            products.append(Product.from_payload(item))

        import_request = payload.get("importRequest", True)
        if not isinstance(import_request, bool):
            raise ValueError("Document field `importRequest` must be a boolean.")

        strings = {
            name: _optional_string(payload, name, "Document") for name in _DOCUMENT_STRING_FIELDS
        }
        if strings["doc_type"] is None:
            strings["doc_type"] = _DEFAULT_DOC_TYPE

        return cls(
            description=description,
            import_request=import_request,
            products=products,
            **strings,
        )


@dataclass(frozen=True, slots=True)
class ApiRequest:
    """Transport-neutral HTTP POST request.

    Attributes:
        url: Absolute endpoint URL.
        headers: Request headers.
        body: Encoded request body.
    """

    url: str
    headers: Mapping[str, str]
    body: bytes


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """HTTP status and decoded body returned by the registration endpoint."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        """Return whether the status code is in the 2xx range."""

        return 200 <= self.status_code < 300


def sample_document() -> Document:
    """Return a fully populated example document with placeholder values."""

    return Document(
        description=Description(participant_inn="1234567890"),
        doc_id="doc_id_example",
        doc_status="NEW",
        owner_inn="1234567890",
        participant_inn="1234567890",
        producer_inn="1234567890",
        production_date="2024-07-24",
        production_type="type_example",
        products=[
            Product(
                certificate_document="cert_doc",
                certificate_document_date="2024-07-24",
                certificate_document_number="cert_number",
                owner_inn="1234567890",
                producer_inn="1234567890",
                production_date="2024-07-24",
                tnved_code="code",
                uit_code="uit_code",
                uitu_code="uitu_code",
            )
        ],
        reg_date="2024-07-24",
        reg_number="reg_number",
    )
