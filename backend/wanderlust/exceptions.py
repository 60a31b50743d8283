"""
Wanderlust Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, the token gate and configuration; caught by handlers.

Exception Hierarchy:
    WanderlustError (base)
    ├── ValidationFailedError          → 400 (lists every bad field)
    ├── DuplicateAccountError          → 400
    ├── InvalidCredentialsError        → 400
    ├── LegacyAccountNotUpgradedError  → 400
    ├── UnauthenticatedError           → 401
    │   └── InvalidTokenError          → 401
    ├── PayloadTooLargeError           → 413
    ├── StorageError                   → 500 (generic message to client)
    └── ConfigurationError             → fatal at startup
"""

from typing import Any, Dict, List, Optional, Sequence


class WanderlustError(Exception):
    """
    Base exception for all Wanderlust application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationFailedError(WanderlustError):
    """
    Raised when a request body has missing or invalid fields.

    Unlike a first-error-wins check, `fields` holds the complete list so one
    round-trip tells the client everything that is wrong.

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Invalid request data. Missing or invalid fields: days (must be a number)",
            "missingFields": ["days (must be a number)"]
        }
    """

    def __init__(
        self,
        fields: Sequence[str],
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.fields: List[str] = list(fields)
        if message is None:
            message = (
                "Invalid request data. Missing or invalid fields: "
                + ", ".join(self.fields)
            )
        ctx = dict(context or {})
        ctx["fields"] = self.fields
        super().__init__(message=message, context=ctx)


class DuplicateAccountError(WanderlustError):
    """An account with this email already has a password."""

    def __init__(self, email: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = dict(context or {})
        if email:
            ctx["email"] = email
        super().__init__(message="User already exists", context=ctx)


class InvalidCredentialsError(WanderlustError):
    """
    Unknown email or wrong password.

    The two cases share one message so a caller cannot probe which emails
    are registered.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials", context=context)


class LegacyAccountNotUpgradedError(WanderlustError):
    """
    Login attempted on a legacy (passwordless) account.

    Distinct from InvalidCredentialsError because the user can fix it:
    signing up with the same email sets the first password.
    """

    def __init__(self, email: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = dict(context or {})
        if email:
            ctx["email"] = email
        super().__init__(
            message="Legacy account detected. Please use Signup to set a password.",
            context=ctx,
        )


class UnauthenticatedError(WanderlustError):
    """No usable bearer token on a protected request (HTTP 401)."""

    def __init__(
        self,
        message: str = "Unauthorized: No token provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(UnauthenticatedError):
    """Token signature mismatch, expiry, malformed token or missing claims."""

    def __init__(
        self,
        message: str = "Unauthorized: Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PayloadTooLargeError(WanderlustError):
    """Request body exceeds `MAX_BODY_BYTES` (HTTP 413)."""

    def __init__(self, limit: int, context: Optional[Dict[str, Any]] = None):
        ctx = dict(context or {})
        ctx["limit"] = limit
        super().__init__(
            message=f"Request body too large. Maximum size is {limit} bytes.",
            context=ctx,
        )
        self.limit = limit


class StorageError(WanderlustError):
    """
    Raised when a persistence operation fails.

    Security Note:
        The message returned to the client is always generic. The underlying
        driver error is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(WanderlustError):
    """Required configuration is missing or invalid. Fatal at startup."""
