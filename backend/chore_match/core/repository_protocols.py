"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Credential hashing and payment settlement accessed through Protocol types
    - Implementations provided by the Marketplace composition root

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Clock is a zero-arg callable so expiry and rate windows are testable without sleeping
"""

from datetime import datetime
from typing import Callable, Protocol

from chore_match.core.domain_types import Chore

Clock = Callable[[], datetime]


class CredentialHasher(Protocol):
    """Opaque password hashing service — implemented by infrastructure."""
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, credential: str) -> bool: ...


class PaymentSettlement(Protocol):
    """Releases a completed chore's payment to its provider."""
    def release(self, chore: Chore) -> None: ...
