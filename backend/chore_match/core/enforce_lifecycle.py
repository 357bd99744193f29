"""Lifecycle Enforcement — validates chore fields and state-machine transitions.

Invariants:
    - All functions are PURE: no IO, no locks, no side effects
    - Return the error to raise on violation, None on success
    - Ownership is checked before state for pay and complete
    - Unpaid and taken chores are visible only to the requester and the assignee
    - Transitions only move forward: pending -> paid -> assigned -> completed

Design Decisions:
    - Pure functions over methods on the registry: testable without threads or fixtures
    - Return errors (not raise): the registry raises while still holding the chore lock,
      so the check and the write stay one atomic step
"""

from chore_match.core.domain_types import AccountId, Chore, ChoreStatus
from chore_match.core.errors import (
    ChoreMatchError, ErrorContext, ForbiddenError, InvalidInputError,
    InvalidTransitionError,
)


# --- Creation -----------------------------------------------------------------

def validate_chore_fields(
    title: str | None, description: str | None, payment_amount: float | None,
) -> ChoreMatchError | None:
    """Title and description non-blank, payment strictly positive."""
    if not title or not title.strip():
        return InvalidInputError("title is required", "title")
    if not description or not description.strip():
        return InvalidInputError("description is required", "description")
    if payment_amount is None:
        return InvalidInputError("payment_amount is required", "payment_amount")
    if isinstance(payment_amount, bool) or not isinstance(payment_amount, (int, float)):
        return InvalidInputError("payment_amount must be a number", "payment_amount")
    if payment_amount != payment_amount or payment_amount <= 0:
        return InvalidInputError("payment_amount must be greater than 0", "payment_amount")
    return None


# --- Pending -> Paid ----------------------------------------------------------

def check_can_mark_paid(chore: Chore, caller_id: AccountId) -> ChoreMatchError | None:
    """Only the owning requester may pay, and only once."""
    if caller_id != chore.requester_id:
        return ForbiddenError(
            "Only the requester who posted this chore can pay for it",
            _context(chore, caller_id),
        )
    if chore.status != ChoreStatus.PENDING:
        return InvalidTransitionError("pay for", chore.status.value, _context(chore, caller_id))
    return None


# --- Paid -> Assigned ---------------------------------------------------------

def check_can_claim(chore: Chore, provider_id: AccountId) -> ChoreMatchError | None:
    """A chore must be paid, and not yet taken, before any provider may claim it."""
    if chore.status != ChoreStatus.PAID:
        return InvalidTransitionError("claim", chore.status.value, _context(chore, provider_id))
    return None


# --- Assigned -> Completed ----------------------------------------------------

def check_can_complete(chore: Chore, caller_id: AccountId) -> ChoreMatchError | None:
    """Only the assigned provider may complete, whatever the current status."""
    if chore.assigned_provider_id is None or caller_id != chore.assigned_provider_id:
        return ForbiddenError(
            "Only the provider assigned to this chore can complete it",
            _context(chore, caller_id),
        )
    if chore.status != ChoreStatus.ASSIGNED:
        return InvalidTransitionError("complete", chore.status.value, _context(chore, caller_id))
    return None


# --- Visibility ---------------------------------------------------------------

def check_can_view(chore: Chore, caller_id: AccountId) -> ChoreMatchError | None:
    """Paid chores are public; otherwise only the owner and the assignee may read it."""
    if chore.status == ChoreStatus.PAID:
        return None
    if caller_id in (chore.requester_id, chore.assigned_provider_id):
        return None
    return ForbiddenError(
        "Chore is only visible to its requester and assigned provider",
        _context(chore, caller_id),
    )


# --- Invariant check ----------------------------------------------------------

def check_assignment_consistent(chore: Chore) -> bool:
    """assigned_provider_id is set iff the chore is assigned or completed."""
    return (chore.assigned_provider_id is not None) == chore.status.has_assignee


# --- Helper -------------------------------------------------------------------

def _context(chore: Chore, caller_id: AccountId) -> ErrorContext:
    return ErrorContext(account_id=caller_id, chore_id=chore.id)
