"""Chore Registry — keyed chore store and the lifecycle state machine.

Invariants:
    - Chores are keyed by id (O(1) lookup) and never deleted
    - Every transition runs check-then-write under the chore's own lock:
      of N concurrent claims on one paid chore exactly one succeeds
    - requester_id never changes; status never regresses
    - Listing reads a snapshot copied under the index lock; filtering runs outside it
    - Iteration order is insertion order

Design Decisions:
    - Per-key threading.Lock over one global lock: transitions on different chores
      never wait on each other
    - Frozen Chore values replaced wholesale: a snapshot handed to a reader is never
      mutated after the fact
    - State is memory-resident: lost on restart (no persistence layer)
"""

import logging
import threading
import uuid
from dataclasses import replace
from typing import Callable

from chore_match.core.domain_types import (
    AccountId, Chore, ChoreId, ChoreStatus, Coordinate, utc_now,
)
from chore_match.core.enforce_lifecycle import (
    check_can_claim, check_can_complete, check_can_mark_paid, validate_chore_fields,
)
from chore_match.core.errors import ChoreMatchError, ResourceNotFoundError
from chore_match.core.proximity import ProximityFilter

logger = logging.getLogger(__name__)


class ChoreRegistry:
    """In-memory chore store guarding every transition with a per-chore lock."""

    def __init__(self, proximity: ProximityFilter | None = None):
        self._proximity = proximity or ProximityFilter()
        self._chores: dict[ChoreId, Chore] = {}
        self._locks: dict[ChoreId, threading.Lock] = {}
        self._by_requester: dict[AccountId, list[ChoreId]] = {}
        self._index_lock = threading.Lock()

    @property
    def proximity(self) -> ProximityFilter:
        return self._proximity

    def __len__(self) -> int:
        with self._index_lock:
            return len(self._chores)

    # --- Creation -------------------------------------------------------------

    def create(
        self,
        requester_id: AccountId,
        title: str,
        description: str,
        payment_amount: float,
        coordinate: Coordinate | None = None,
    ) -> Chore:
        error = validate_chore_fields(title, description, payment_amount)
        if error:
            raise error
        chore = Chore(
            id=ChoreId(uuid.uuid4().hex),
            title=title.strip(),
            description=description.strip(),
            payment_amount=float(payment_amount),
            requester_id=requester_id,
            coordinate=coordinate,
        )
        with self._index_lock:
            self._chores[chore.id] = chore
            self._locks[chore.id] = threading.Lock()
            self._by_requester.setdefault(requester_id, []).append(chore.id)
        return chore

    # --- Lookup ---------------------------------------------------------------

    def get(self, chore_id: ChoreId) -> Chore:
        with self._index_lock:
            chore = self._chores.get(chore_id)
        if chore is None:
            raise ResourceNotFoundError("Chore", chore_id)
        return chore

    # --- Transitions ----------------------------------------------------------

    def mark_paid(self, chore_id: ChoreId, caller_id: AccountId) -> Chore:
        return self._transition(
            chore_id,
            lambda chore: check_can_mark_paid(chore, caller_id),
            lambda chore: replace(chore, status=ChoreStatus.PAID),
        )

    def claim(self, chore_id: ChoreId, provider_id: AccountId) -> Chore:
        return self._transition(
            chore_id,
            lambda chore: check_can_claim(chore, provider_id),
            lambda chore: replace(
                chore, status=ChoreStatus.ASSIGNED, assigned_provider_id=provider_id,
            ),
        )

    def mark_complete(self, chore_id: ChoreId, caller_id: AccountId) -> Chore:
        return self._transition(
            chore_id,
            lambda chore: check_can_complete(chore, caller_id),
            lambda chore: replace(chore, status=ChoreStatus.COMPLETED),
        )

    # --- Queries --------------------------------------------------------------

    def list_for_requester(self, requester_id: AccountId) -> list[Chore]:
        with self._index_lock:
            ids = list(self._by_requester.get(requester_id, ()))
            return [self._chores[chore_id] for chore_id in ids]

    def list_available(
        self, near: Coordinate | None = None, radius_km: float | None = None,
    ) -> list[Chore]:
        """Paid chores, optionally restricted to radius_km around near."""
        with self._index_lock:
            snapshot = list(self._chores.values())
        paid = [c for c in snapshot if c.status == ChoreStatus.PAID]
        if near is None:
            return paid
        proximity = self._proximity
        if radius_km is not None and radius_km != proximity.radius_km:
            proximity = proximity.with_radius(radius_km)
        return proximity.select(near, paid)

    def count_by_status(self) -> dict[str, int]:
        with self._index_lock:
            snapshot = list(self._chores.values())
        counts = {status.value: 0 for status in ChoreStatus}
        for chore in snapshot:
            counts[chore.status.value] += 1
        return counts

    # --- Helper ---------------------------------------------------------------

    def _transition(
        self,
        chore_id: ChoreId,
        check: Callable[[Chore], ChoreMatchError | None],
        apply: Callable[[Chore], Chore],
    ) -> Chore:
        with self._index_lock:
            lock = self._locks.get(chore_id)
        if lock is None:
            raise ResourceNotFoundError("Chore", chore_id)

        with lock:
            with self._index_lock:
                current = self._chores[chore_id]
            error = check(current)
            if error:
                raise error
            updated = replace(apply(current), updated_at=utc_now())
            with self._index_lock:
                self._chores[chore_id] = updated

        logger.debug(
            f"Chore {chore_id}: {current.status.value} -> {updated.status.value}",
            extra={"chore_id": chore_id},
        )
        return updated
