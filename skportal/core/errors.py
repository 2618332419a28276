"""Error taxonomy for SK Portal.

Validation and authorization errors are raised before any mutation.
Upstream errors wrap data store and blob store failures.
"""

from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base class for all portal errors."""

    code = "portal_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details


class ValidationError(PortalError):
    """Missing required field, wrong file type/size, quota not met."""

    code = "validation_error"


class QuotaNotMetError(ValidationError):
    """Roster does not meet the female representation quota."""

    code = "quota_not_met"

    def __init__(self, shortfall: int, percentage: float, threshold: int):
        super().__init__(
            f"Female representation is {percentage:.1f}%, minimum is {threshold}%. "
            f"Add at least {shortfall} more female officer(s).",
            shortfall=shortfall,
            percentage=round(percentage, 1),
            threshold=threshold,
        )
        self.shortfall = shortfall


class AuthorizationError(PortalError):
    """Actor cannot perform the requested operation."""

    code = "authorization_error"


class NotFoundError(PortalError):
    """Referenced request, officer or file is missing."""

    code = "not_found"


class ConflictError(PortalError):
    """Concurrent modification or uniqueness conflict."""

    code = "conflict"


class UpstreamError(PortalError):
    """Data store or blob store failure."""

    code = "upstream_error"

    def __init__(self, message: str, cause: Optional[BaseException] = None, **details: Any):
        super().__init__(message, **details)
        self.cause = cause
