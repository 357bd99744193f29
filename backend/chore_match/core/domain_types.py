"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId, ChoreId, SessionToken wrap str — never pass bare strings in domain logic
    - Coordinate is bounded to [-90, 90] x [-180, 180] decimal degrees (WGS84, no datum conversion)
    - ChoreStatus only advances forward: pending -> paid -> assigned -> completed
    - Account, Chore and Session are frozen — every change produces a new value

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Frozen dataclasses: readers holding a snapshot never observe a half-applied transition
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", str)
ChoreId = NewType("ChoreId", str)
SessionToken = NewType("SessionToken", str)


# ─── Constants ───────────────────────────────────────────────────

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LATITUDE = 111.0
DEFAULT_PROXIMITY_RADIUS_KM = 10.0


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account roles — the two identity pools are disjoint."""
    REQUESTER = "requester"
    PROVIDER = "provider"


class ChoreStatus(str, Enum):
    """Chore lifecycle states, declared in lifecycle order."""
    PENDING = "pending"
    PAID = "paid"
    ASSIGNED = "assigned"
    COMPLETED = "completed"

    @property
    def has_assignee(self) -> bool:
        return self in (ChoreStatus.ASSIGNED, ChoreStatus.COMPLETED)


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    @classmethod
    def from_optional(
        cls, latitude: float | None, longitude: float | None,
    ) -> "Coordinate | None":
        """Build a coordinate only when both parts are present."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude, longitude)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Account:
    """Registered identity. `credential` is the derived hash, never the password."""
    id: AccountId
    name: str
    email: str
    credential: str
    role: Role
    address: str | None = None
    coordinate: Coordinate | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class Chore:
    """A paid task owned by a requester."""
    id: ChoreId
    title: str
    description: str
    payment_amount: float
    requester_id: AccountId
    status: ChoreStatus = ChoreStatus.PENDING
    assigned_provider_id: AccountId | None = None
    coordinate: Coordinate | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class Session:
    """Authenticated identity bound to an opaque bearer token."""
    token: SessionToken
    account_id: AccountId
    role: Role
    issued_at: datetime = field(default_factory=utc_now)
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at
