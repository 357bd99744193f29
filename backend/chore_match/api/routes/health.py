"""Health Probe — liveness endpoint with in-memory registry counts.

Invariants:
    - GET /api/health/ always returns 200 if process is up
    - Never requires a token and is never rate limited

Design Decisions:
    - No readiness probe: there is no external dependency to check
"""

from fastapi import APIRouter, Depends, status

from chore_match.services.marketplace import Marketplace, get_marketplace

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
def health_check(market: Marketplace = Depends(get_marketplace)):
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "chore-match-api",
        "version": "1.0.0",
        "counts": market.stats(),
    }
