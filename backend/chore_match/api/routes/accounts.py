"""Account Routes — registration, login and logout.

Invariants:
    - Responses never include credentials; the token appears only in the login response
    - Login failures are uniform 401s regardless of cause
    - Logout is idempotent (204 even for an already-revoked token)

Design Decisions:
    - Plain `def` handlers: password hashing runs in the threadpool, not on the event loop
"""

from fastapi import APIRouter, Depends, Response, status

from chore_match.api.dependencies import enforce_rate_limit, get_bearer_token
from chore_match.schemas.account import (
    AccountResponse, LoginRequest, LoginResponse, RegisterRequest, RegisterResponse,
)
from chore_match.services.marketplace import Marketplace, get_marketplace

router = APIRouter(
    prefix="/api", tags=["accounts"], dependencies=[Depends(enforce_rate_limit)],
)


@router.post(
    "/register", response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(body: RegisterRequest, market: Marketplace = Depends(get_marketplace)):
    """Create a requester or provider account."""
    account = market.register(
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        address=body.address,
        coordinate=body.coordinate(),
    )
    return RegisterResponse(account=AccountResponse.from_account(account))


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, market: Marketplace = Depends(get_marketplace)):
    """Authenticate and issue a bearer token."""
    account, token = market.login(body.email, body.password, body.role)
    return LoginResponse(account=AccountResponse.from_account(account), token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: str = Depends(get_bearer_token),
    market: Marketplace = Depends(get_marketplace),
):
    """Revoke the presented token."""
    market.logout(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
