"""Request throttling primitives.

This package defines the blocking admission gate placed in front of every
external API call, its cancellation token, and the window time units.
"""

from .cancellation import CancellationToken
from .gate import AdmissionGate
from .units import TimeUnit

__all__ = ["AdmissionGate", "CancellationToken", "TimeUnit"]
