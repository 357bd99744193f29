"""API Dependencies — bearer-token identity and admission control for routes.

Invariants:
    - Missing, unknown, revoked and expired tokens all raise the same UnauthenticatedError
    - Rate limiting keyed by client host; denial raises RateLimitExceededError (429)

Design Decisions:
    - HTTPBearer(auto_error=False): we raise our own error envelope instead of FastAPI's
    - Dependencies are plain `def`: they touch locks, not IO
"""

from math import ceil

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chore_match.core.domain_types import Session
from chore_match.core.errors import ErrorContext, RateLimitExceededError, UnauthenticatedError
from chore_match.services.marketplace import Marketplace, get_marketplace

bearer = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> str:
    if not credentials or not credentials.credentials:
        raise UnauthenticatedError()
    return credentials.credentials


def get_current_session(
    token: str = Depends(get_bearer_token),
    market: Marketplace = Depends(get_marketplace),
) -> Session:
    """Resolve the caller's identity from the Authorization header."""
    return market.identify(token)


def enforce_rate_limit(
    request: Request, market: Marketplace = Depends(get_marketplace),
) -> None:
    client_key = request.client.host if request.client else "unknown"
    retry_after = market.admit(client_key)
    if retry_after is not None:
        raise RateLimitExceededError(
            retry_after_ms=ceil(retry_after * 1000),
            context=ErrorContext(debug_info={"path": request.url.path}),
        )
