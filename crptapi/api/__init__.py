"""CRPT API client and transport.

This package sends throttled create-document requests to the CRPT REST API.
"""

from .crpt_client import CrptApi, CrptApiError, RequestsTransport, Transport

__all__ = ["CrptApi", "CrptApiError", "RequestsTransport", "Transport"]
