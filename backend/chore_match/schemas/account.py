"""Account Schemas — Pydantic models with field-level validation for identity endpoints.

Invariants:
    - AccountResponse never carries the credential; LoginResponse is the only place a token appears
    - role accepts "requester" | "provider"; legacy "user" maps to requester
    - latitude/longitude bounded to WGS84 ranges and given together or not at all

Design Decisions:
    - validation_alias accepts the browser client's `type` field alongside `role`
    - field_validator for side-effect-free transforms (strip) — keeps models pure
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from chore_match.core.domain_types import Account, Coordinate, Role

_LEGACY_ROLES = {"user": Role.REQUESTER.value}


def _normalize_role(v):
    if isinstance(v, str):
        v = v.strip().lower()
        return _LEGACY_ROLES.get(v, v)
    return v


class CoordinateFields(BaseModel):
    """Optional WGS84 point shared by registration and chore creation."""
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def both_or_neither(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self

    def coordinate(self) -> Coordinate | None:
        return Coordinate.from_optional(self.latitude, self.longitude)


class RegisterRequest(CoordinateFields):
    """Registration — name, email, password and role required."""
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1, max_length=1024)
    role: Role = Field(validation_alias=AliasChoices("role", "type"))
    address: str | None = Field(None, max_length=500)

    @field_validator("name", "email")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v

    @field_validator("role", mode="before")
    @classmethod
    def accept_legacy_role(cls, v):
        return _normalize_role(v)


class LoginRequest(BaseModel):
    """Login — credentials are checked per role pool."""
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)
    role: Role = Field(validation_alias=AliasChoices("role", "type"))

    @field_validator("role", mode="before")
    @classmethod
    def accept_legacy_role(cls, v):
        return _normalize_role(v)


class AccountResponse(BaseModel):
    """Public account data — no credential."""
    id: str
    name: str
    email: str
    role: Role
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            address=account.address,
            latitude=account.coordinate.latitude if account.coordinate else None,
            longitude=account.coordinate.longitude if account.coordinate else None,
            created_at=account.created_at,
        )


class RegisterResponse(BaseModel):
    message: str = "Registration successful"
    account: AccountResponse


class LoginResponse(BaseModel):
    message: str = "Login successful"
    account: AccountResponse
    token: str
