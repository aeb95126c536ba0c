"""Data models for CRPT document registration."""

from .datatypes import ApiRequest, ApiResponse, Description, Document, Product, sample_document

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "Description",
    "Document",
    "Product",
    "sample_document",
]
