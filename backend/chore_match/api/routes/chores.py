"""Chore Routes — create, pay, list, claim and complete chores.

Invariants:
    - Every route requires a bearer token
    - ownerId listing restricted to the caller's own chores (403 otherwise)
    - lat and lon must be supplied together (400 otherwise)
    - Transition errors map to 404 / 403 / 400 via the global ChoreMatchError handler

Design Decisions:
    - Plain `def` handlers run in the threadpool: concurrent claims race on the
      registry's per-chore lock, not on the event loop
    - Query alias ownerId kept for the browser client
"""

from fastapi import APIRouter, Depends, Query, status

from chore_match.api.dependencies import enforce_rate_limit, get_current_session
from chore_match.core.domain_types import ChoreId, Coordinate, Session
from chore_match.core.errors import InvalidInputError
from chore_match.schemas.chore import ChoreCreate, ChoreResponse
from chore_match.services.marketplace import Marketplace, get_marketplace

router = APIRouter(
    prefix="/api/chores", tags=["chores"], dependencies=[Depends(enforce_rate_limit)],
)


@router.post("", response_model=ChoreResponse, status_code=status.HTTP_201_CREATED)
def create_chore(
    body: ChoreCreate,
    caller: Session = Depends(get_current_session),
    market: Marketplace = Depends(get_marketplace),
):
    """Post a new chore (requesters only). Starts as pending."""
    chore = market.create_chore(
        caller, body.title, body.description, body.payment_amount, body.coordinate(),
    )
    return ChoreResponse.from_chore(chore)


@router.get("", response_model=list[ChoreResponse])
def list_chores(
    lat: float | None = Query(None, ge=-90, le=90),
    lon: float | None = Query(None, ge=-180, le=180),
    radius_km: float | None = Query(None, gt=0),
    owner_id: str | None = Query(None, alias="ownerId"),
    caller: Session = Depends(get_current_session),
    market: Marketplace = Depends(get_marketplace),
):
    """Own chores with ?ownerId, otherwise paid chores near ?lat&lon."""
    if (lat is None) != (lon is None):
        raise InvalidInputError("lat and lon must be provided together", "lat")
    chores = market.list_chores(
        caller,
        owner_id=owner_id,
        near=Coordinate.from_optional(lat, lon),
        radius_km=radius_km,
    )
    return [ChoreResponse.from_chore(c) for c in chores]


@router.get("/{chore_id}", response_model=ChoreResponse)
def get_chore(
    chore_id: str,
    caller: Session = Depends(get_current_session),
    market: Marketplace = Depends(get_marketplace),
):
    """Paid chores, or the caller's own (as requester or assignee)."""
    return ChoreResponse.from_chore(market.get_chore(caller, ChoreId(chore_id)))


@router.post("/{chore_id}/pay", response_model=ChoreResponse)
def pay_chore(
    chore_id: str,
    caller: Session = Depends(get_current_session),
    market: Marketplace = Depends(get_marketplace),
):
    """Confirm payment (owning requester): pending -> paid."""
    return ChoreResponse.from_chore(market.mark_paid(caller, ChoreId(chore_id)))


@router.post("/{chore_id}/assign", response_model=ChoreResponse)
def claim_chore(
    chore_id: str,
    caller: Session = Depends(get_current_session),
    market: Marketplace = Depends(get_marketplace),
):
    """Claim a paid chore (providers only): paid -> assigned."""
    return ChoreResponse.from_chore(market.claim(caller, ChoreId(chore_id)))


@router.post("/{chore_id}/complete", response_model=ChoreResponse)
def complete_chore(
    chore_id: str,
    caller: Session = Depends(get_current_session),
    market: Marketplace = Depends(get_marketplace),
):
    """Mark done (assigned provider only): assigned -> completed."""
    return ChoreResponse.from_chore(market.mark_complete(caller, ChoreId(chore_id)))
