"""Rate limiting infrastructure.

Provides:
- RateGate: sliding 60s window plus bounded concurrency slots
- BackoffPolicy: delay strategies between retries
"""

from .backoff import BackoffPolicy, ExponentialBackoff, NoBackoff
from .gate import Admission, RateGate

__all__ = [
    "Admission",
    "RateGate",
    "BackoffPolicy",
    "ExponentialBackoff",
    "NoBackoff",
]
