"""Account Registry — two disjoint identity pools (requesters, providers) keyed by email.

Invariants:
    - (email, role) is unique; the same email may exist once per role
    - Only the derived credential is stored, never the raw password
    - authenticate() fails identically for unknown account and wrong password
    - Hashing and verification never run while holding the registry lock

Design Decisions:
    - One dict per role: role-specific lookups never scan the other pool
    - Unknown-email logins still verify against a dummy credential so both
      failure paths do the same work
"""

import secrets
import threading
import uuid

from chore_match.core.domain_types import Account, AccountId, Coordinate, Role
from chore_match.core.errors import (
    DuplicateAccountError, ErrorContext, InvalidCredentialsError,
    InvalidInputError, ResourceNotFoundError,
)
from chore_match.core.repository_protocols import CredentialHasher


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountRegistry:
    """In-memory account store with per-role email uniqueness."""

    def __init__(self, hasher: CredentialHasher):
        self._hasher = hasher
        self._pools: dict[Role, dict[str, Account]] = {role: {} for role in Role}
        self._by_id: dict[AccountId, Account] = {}
        self._lock = threading.Lock()
        self._dummy_credential = hasher.hash(secrets.token_urlsafe(16))

    def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        role: Role | str | None,
        address: str | None = None,
        coordinate: Coordinate | None = None,
    ) -> Account:
        resolved_role = _validate_registration(name, email, password, role)
        key = normalize_email(email)

        # Cheap pre-check so duplicates don't pay for a hash
        with self._lock:
            if key in self._pools[resolved_role]:
                raise DuplicateAccountError(resolved_role.value)

        credential = self._hasher.hash(password)
        account = Account(
            id=AccountId(uuid.uuid4().hex),
            name=name.strip(),
            email=key,
            credential=credential,
            role=resolved_role,
            address=address,
            coordinate=coordinate,
        )
        with self._lock:
            pool = self._pools[resolved_role]
            if key in pool:
                raise DuplicateAccountError(resolved_role.value)
            pool[key] = account
            self._by_id[account.id] = account
        return account

    def authenticate(self, email: str, password: str, role: Role | str) -> Account:
        try:
            resolved_role = Role(role)
        except ValueError:
            resolved_role = None

        account = None
        if resolved_role is not None and email:
            with self._lock:
                account = self._pools[resolved_role].get(normalize_email(email))

        credential = account.credential if account else self._dummy_credential
        verified = self._hasher.verify(password or "", credential)
        if account is None or not verified:
            raise InvalidCredentialsError(
                ErrorContext(account_id=account.id if account else None),
            )
        return account

    def get(self, account_id: AccountId) -> Account:
        with self._lock:
            account = self._by_id.get(account_id)
        if account is None:
            raise ResourceNotFoundError("Account", account_id)
        return account

    def count(self, role: Role | None = None) -> int:
        with self._lock:
            if role is None:
                return len(self._by_id)
            return len(self._pools[role])


def _validate_registration(
    name: str | None, email: str | None, password: str | None, role: Role | str | None,
) -> Role:
    if not name or not name.strip():
        raise InvalidInputError("name is required", "name")
    if not email or not email.strip():
        raise InvalidInputError("email is required", "email")
    if not password:
        raise InvalidInputError("password is required", "password")
    if role is None:
        raise InvalidInputError("role is required", "role")
    try:
        return Role(role)
    except ValueError:
        raise InvalidInputError(
            f"role must be one of: {', '.join(r.value for r in Role)}", "role",
        )
