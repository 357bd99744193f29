"""Chore Schemas — request/response models for the chore lifecycle endpoints.

Invariants:
    - ChoreCreate.payment_amount > 0; title and description stripped, non-empty
    - ChoreResponse exposes status and assignee but nothing about the requester's account

Design Decisions:
    - validation_alias accepts the browser client's `payment` field
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from chore_match.core.domain_types import Chore, ChoreStatus
from chore_match.schemas.account import CoordinateFields


class ChoreCreate(CoordinateFields):
    """Chore creation by a requester."""
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    payment_amount: float = Field(
        gt=0, allow_inf_nan=False,
        validation_alias=AliasChoices("payment_amount", "paymentAmount", "payment"),
    )

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class ChoreResponse(BaseModel):
    """Public chore representation."""
    id: str
    title: str
    description: str
    payment_amount: float
    requester_id: str
    assigned_provider_id: str | None = None
    status: ChoreStatus
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_chore(cls, chore: Chore) -> "ChoreResponse":
        return cls(
            id=chore.id,
            title=chore.title,
            description=chore.description,
            payment_amount=chore.payment_amount,
            requester_id=chore.requester_id,
            assigned_provider_id=chore.assigned_provider_id,
            status=chore.status,
            latitude=chore.coordinate.latitude if chore.coordinate else None,
            longitude=chore.coordinate.longitude if chore.coordinate else None,
            created_at=chore.created_at,
            updated_at=chore.updated_at,
        )
