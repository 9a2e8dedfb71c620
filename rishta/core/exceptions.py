"""
Domain errors for the matchmaking API.

Each error carries the HTTP status it maps to; rishta.main turns any
RishtaError into a ``{"success": false, "message": ...}`` response.
"""
from typing import Optional


class RishtaError(Exception):
    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RishtaError):
    status_code = 400
    default_message = "Invalid or missing input"


class AuthError(RishtaError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(RishtaError):
    status_code = 403
    default_message = "Access denied. Admins only."


class NotFoundError(RishtaError):
    status_code = 404
    default_message = "Not found"


class AlreadyApprovedError(RishtaError):
    status_code = 409
    default_message = "Account is already approved"


class PackageExpiredError(RishtaError):
    status_code = 403
    default_message = "Package expired! Please renew to unlock more profiles."


class InsufficientCreditsError(RishtaError):
    status_code = 403
    default_message = "No credits left! Please upgrade."


class InvalidTierError(RishtaError):
    status_code = 400
    default_message = "Unknown package tier"
