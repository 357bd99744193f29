"""Marketplace — composition root wiring registries, sessions, proximity and settlement.

Invariants:
    - One Marketplace owns every registry; there is no other mutable state
    - Role rules enforced here: only requesters create, only providers claim;
      unpaid chores readable only by their requester or assignee;
      pay and complete are gated by ownership in the registry
    - Chores always reference an existing requester account
    - Passwords, credentials and tokens never appear in log records

Design Decisions:
    - Synchronous methods: routes are plain `def` handlers run in FastAPI's threadpool,
      so concurrent requests genuinely race on the per-chore locks
    - Singleton initialized on startup (like a DB manager); get_marketplace() is the
      FastAPI dependency and is overridden in tests
    - State lost on restart: everything is memory-resident
"""

import logging
import threading

from chore_match.config import Settings, get_settings
from chore_match.core.account_registry import AccountRegistry
from chore_match.core.chore_registry import ChoreRegistry
from chore_match.core.domain_types import (
    Account, AccountId, Chore, ChoreId, Coordinate, Role, Session,
)
from chore_match.core.enforce_lifecycle import check_can_view
from chore_match.core.errors import (
    ErrorContext, ForbiddenError, InvalidCredentialsError, InvalidInputError,
    InvalidTransitionError,
)
from chore_match.core.geo import DISTANCE_FORMULAS
from chore_match.core.proximity import ProximityFilter
from chore_match.core.rate_limit import RateLimiter
from chore_match.core.repository_protocols import CredentialHasher, PaymentSettlement
from chore_match.core.session_store import SessionStore
from chore_match.infrastructure.password_hashing import Pbkdf2Hasher
from chore_match.infrastructure.payments import UnimplementedSettlement

logger = logging.getLogger(__name__)


class Marketplace:
    """Application service exposing the chore lifecycle to the API layer."""

    def __init__(
        self,
        accounts: AccountRegistry,
        sessions: SessionStore,
        chores: ChoreRegistry,
        settlement: PaymentSettlement,
        rate_limiter: RateLimiter | None = None,
        max_query_radius_km: float = 100.0,
    ):
        self.accounts = accounts
        self.sessions = sessions
        self.chores = chores
        self.settlement = settlement
        self.rate_limiter = rate_limiter
        self.max_query_radius_km = max_query_radius_km

    # --- Identity -------------------------------------------------------------

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: Role | str,
        address: str | None = None,
        coordinate: Coordinate | None = None,
    ) -> Account:
        account = self.accounts.register(name, email, password, role, address, coordinate)
        logger.info(
            "Account registered",
            extra={"account_id": account.id, "role": account.role.value},
        )
        return account

    def login(self, email: str, password: str, role: Role | str) -> tuple[Account, str]:
        try:
            account = self.accounts.authenticate(email, password, role)
        except InvalidCredentialsError:
            logger.warning("Login failed", extra={"role": getattr(role, "value", role)})
            raise
        token = self.sessions.issue(account.id, account.role)
        logger.info(
            "Login succeeded",
            extra={"account_id": account.id, "role": account.role.value},
        )
        return account, token

    def logout(self, token: str) -> None:
        session = self.sessions.revoke(token)
        if session is not None:
            logger.info("Logged out", extra={"account_id": session.account_id})

    def identify(self, token: str | None) -> Session:
        return self.sessions.resolve(token)

    # --- Chore lifecycle ------------------------------------------------------

    def create_chore(
        self,
        caller: Session,
        title: str,
        description: str,
        payment_amount: float,
        coordinate: Coordinate | None = None,
    ) -> Chore:
        _require_role(caller, Role.REQUESTER, "Only requesters can post chores")
        self.accounts.get(caller.account_id)
        chore = self.chores.create(
            caller.account_id, title, description, payment_amount, coordinate,
        )
        logger.info(
            "Chore created",
            extra={"chore_id": chore.id, "account_id": caller.account_id},
        )
        return chore

    def get_chore(self, caller: Session, chore_id: ChoreId) -> Chore:
        chore = self.chores.get(chore_id)
        error = check_can_view(chore, caller.account_id)
        if error:
            raise error
        return chore

    def mark_paid(self, caller: Session, chore_id: ChoreId) -> Chore:
        chore = self.chores.mark_paid(chore_id, caller.account_id)
        logger.info(
            "Chore paid", extra={"chore_id": chore_id, "account_id": caller.account_id},
        )
        return chore

    def claim(self, caller: Session, chore_id: ChoreId) -> Chore:
        _require_role(caller, Role.PROVIDER, "Only providers can claim chores")
        try:
            chore = self.chores.claim(chore_id, caller.account_id)
        except InvalidTransitionError:
            logger.info(
                "Claim rejected: chore not available",
                extra={"chore_id": chore_id, "account_id": caller.account_id},
            )
            raise
        logger.info(
            "Chore claimed", extra={"chore_id": chore_id, "account_id": caller.account_id},
        )
        return chore

    def mark_complete(self, caller: Session, chore_id: ChoreId) -> Chore:
        chore = self.chores.mark_complete(chore_id, caller.account_id)
        logger.info(
            "Chore completed", extra={"chore_id": chore_id, "account_id": caller.account_id},
        )
        self.settlement.release(chore)
        return chore

    def list_chores(
        self,
        caller: Session,
        owner_id: AccountId | None = None,
        near: Coordinate | None = None,
        radius_km: float | None = None,
    ) -> list[Chore]:
        """Owner dashboard when owner_id is given, otherwise available (paid) chores."""
        if owner_id is not None:
            if owner_id != caller.account_id:
                raise ForbiddenError(
                    "Cannot list chores owned by another account",
                    ErrorContext(account_id=caller.account_id),
                )
            return self.chores.list_for_requester(owner_id)

        if radius_km is not None and radius_km > self.max_query_radius_km:
            raise InvalidInputError(
                f"radius_km must be <= {self.max_query_radius_km}", "radius_km",
            )
        return self.chores.list_available(near, radius_km)

    # --- Admission ------------------------------------------------------------

    def admit(self, client_key: str) -> float | None:
        """None if admitted, otherwise seconds until the client's window resets."""
        if self.rate_limiter is None or self.rate_limiter.check(client_key):
            return None
        logger.warning("Rate limit exceeded", extra={"client_key": client_key})
        return self.rate_limiter.retry_after_seconds(client_key)

    def stats(self) -> dict:
        return {
            "accounts": {role.value: self.accounts.count(role) for role in Role},
            "chores": self.chores.count_by_status(),
            "sessions": self.sessions.active_count,
        }


def _require_role(caller: Session, role: Role, message: str) -> None:
    if caller.role != role:
        raise ForbiddenError(message, ErrorContext(account_id=caller.account_id))


def build_marketplace(
    settings: Settings,
    hasher: CredentialHasher | None = None,
    settlement: PaymentSettlement | None = None,
) -> Marketplace:
    """Assemble a Marketplace from settings."""
    proximity = ProximityFilter(
        settings.proximity_radius_km, DISTANCE_FORMULAS[settings.distance_formula],
    )
    rate_limiter = None
    if settings.rate_limit_enabled:
        rate_limiter = RateLimiter(
            settings.rate_limit_window_seconds,
            settings.rate_limit_max_requests,
            settings.rate_limit_cleanup_interval_seconds,
        )
    return Marketplace(
        accounts=AccountRegistry(hasher or Pbkdf2Hasher(settings.password_hash_iterations)),
        sessions=SessionStore(
            settings.session_ttl_seconds,
            sweep_interval_seconds=settings.session_sweep_interval_seconds,
        ),
        chores=ChoreRegistry(proximity),
        settlement=settlement or UnimplementedSettlement(),
        rate_limiter=rate_limiter,
        max_query_radius_km=settings.max_query_radius_km,
    )


# Singleton (initialized on startup)
marketplace: Marketplace | None = None
_init_lock = threading.Lock()


def init_marketplace(settings: Settings | None = None) -> Marketplace:
    global marketplace
    with _init_lock:
        if marketplace is None:
            marketplace = build_marketplace(settings or get_settings())
    return marketplace


def get_marketplace() -> Marketplace:
    """FastAPI dependency for the process-wide Marketplace."""
    if marketplace is None:
        return init_marketplace()
    return marketplace
