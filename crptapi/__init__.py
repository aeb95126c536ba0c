"""Top-level package for the CRPT document-registration client.

The main entry point is `CrptApi`, which registers signed documents while an
`AdmissionGate` bounds how many requests are sent per time window.
"""

from .api.crpt_client import CrptApi
from .throttle.gate import AdmissionGate

__all__ = ["AdmissionGate", "CrptApi", "__version__"]

__version__ = "0.1.0"
