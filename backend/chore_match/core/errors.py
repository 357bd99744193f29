"""Error Hierarchy — typed, categorized exceptions for all chore marketplace failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; unexpected faults surface as 500 INTERNAL_ERROR
    - InvalidCredentialsError and UnauthenticatedError share code and message —
      callers cannot tell "no such account" from "wrong password" or "bad token"
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ChoreMatchError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Claim-race losers get the same InvalidTransitionError as a stale claim
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    account_id: str | None = None
    chore_id: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class ChoreMatchError(Exception):
    """Base exception for all chore marketplace errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "chore_id": self.context.chore_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Input Errors ───────────────────────────────────────────────

class InvalidInputError(ChoreMatchError):
    """Malformed or missing request data — user-correctable."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class DuplicateAccountError(ChoreMatchError):
    """An account with the same email already exists for this role."""
    def __init__(self, role: str, context: ErrorContext | None = None):
        super().__init__(
            f"An account with this email is already registered as {role}",
            "DUPLICATE_ACCOUNT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 400,
        )
        self.role = role


# ─── Identity Errors (deliberately indistinguishable) ───────────

_AUTH_FAILED_MESSAGE = "Authentication failed"


class InvalidCredentialsError(ChoreMatchError):
    """Login failed — unknown email/role or wrong password."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            _AUTH_FAILED_MESSAGE, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class UnauthenticatedError(ChoreMatchError):
    """Bearer token missing, unknown, revoked or expired."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            _AUTH_FAILED_MESSAGE, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(ChoreMatchError):
    """Authenticated, but not allowed to act on this entity."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Entity Errors ──────────────────────────────────────────────

class ResourceNotFoundError(ChoreMatchError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


class InvalidTransitionError(ChoreMatchError):
    """Lifecycle precondition violated (includes lost claim races)."""
    def __init__(
        self, action: str, current_status: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot {action} a chore in status '{current_status}'",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.action = action
        self.current_status = current_status


# ─── Admission Errors ───────────────────────────────────────────

class RateLimitExceededError(ChoreMatchError):
    """Client exceeded its request allowance for the current window."""
    def __init__(self, retry_after_ms: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            "Too many requests, please try again later.",
            "RATE_LIMITED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429,
        )
