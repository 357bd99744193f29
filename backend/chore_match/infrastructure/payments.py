"""Payment Settlement — boundary for releasing a completed chore's payment.

Invariants:
    - release() never fails a completion
    - No money moves: every completed chore is recorded as pending settlement

Design Decisions:
    - Explicit unimplemented boundary over a fabricated transfer: the gap is logged
      and countable instead of silently ignored
"""

import logging
import threading

from chore_match.core.domain_types import Chore, ChoreId

logger = logging.getLogger(__name__)


class UnimplementedSettlement:
    """PaymentSettlement that records chores awaiting a real payout integration."""

    def __init__(self):
        self._pending: list[ChoreId] = []
        self._lock = threading.Lock()

    def release(self, chore: Chore) -> None:
        with self._lock:
            self._pending.append(chore.id)
        logger.warning(
            f"Payment release not implemented; {chore.payment_amount:.2f} owed to provider",
            extra={"chore_id": chore.id, "account_id": chore.assigned_provider_id},
        )

    @property
    def pending(self) -> list[ChoreId]:
        with self._lock:
            return list(self._pending)
