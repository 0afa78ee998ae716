"""Error Hierarchy — typed, categorized exceptions for all like/match failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages
    - DuplicateEdgeError never reaches a caller: MatchEngine resolves it into
      an idempotent success
    - NotificationDeliveryError never reaches a caller: the dispatcher logs it

Design Decisions:
    - Single hierarchy with LikesError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    target_id: str | None = None
    edge_id: str | None = None
    debug_info: dict[str, Any] | None = None


class LikesError(Exception):
    """Base exception for all like/match errors."""

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
                    "user_id": self.context.user_id,
                    "target_id": self.context.target_id,
                    "edge_id": self.context.edge_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidRequestError(LikesError):
    """Request is well-formed but not allowed (e.g. liking yourself)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class UnauthorizedError(LikesError):
    """Caller identity missing or not a valid user identifier."""
    def __init__(self, message: str = "Unauthorized", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(LikesError):
    """Edge is not addressed to the acting user."""
    def __init__(self, message: str = "Forbidden", context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(LikesError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type


class DuplicateEdgeError(LikesError):
    """An edge for the ordered pair already exists (unique constraint hit)."""
    def __init__(self, from_user: str, to_user: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = ctx.user_id or from_user
        ctx.target_id = ctx.target_id or to_user
        super().__init__(
            f"Edge {from_user} -> {to_user} already exists",
            "DUPLICATE_EDGE", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, ctx, 409,
        )
        self.from_user = from_user
        self.to_user = to_user


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(LikesError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class NotificationDeliveryError(LikesError):
    """Push gateway rejected or failed a delivery."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Notification delivery failed: {message}",
            "NOTIFICATION_DELIVERY_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.status_code = status_code
