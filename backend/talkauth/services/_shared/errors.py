"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. Each one carries an HTTP-equivalent ``status`` and a stable
snake_case ``code`` so the API layer (``talkauth/core/errors.py``) can render
them without guessing, and so non-HTTP callers can branch on ``code``.

Authentication failures are deliberately coarse: bad credentials, bad tokens
and revoked tokens all surface as :class:`AuthenticationFailedError` so callers
cannot probe which accounts exist.
"""

from __future__ import annotations

from dataclasses import dataclass


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Subclasses override :attr:`status` and :attr:`code`; instances may refine
    the code (e.g. ``account_not_found``) without changing the class.
    """

    status: int = 400
    code: str = "bad_request"

    def __init__(self, message: str = "", *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationConflictError(ServiceError):
    """Raised when sign-up data collides with an existing account."""

    status = 409
    code = "validation_conflict"


class AuthenticationFailedError(ServiceError):
    """
    Raised for bad credentials, bad/expired/revoked access tokens and wrong
    verification codes.
    """

    status = 401
    code = "authentication_failed"

    def __init__(
        self, message: str = "Authentication failed", *, code: str | None = None
    ) -> None:
        super().__init__(message, code=code)


class InvalidRefreshTokenError(ServiceError):
    """
    Raised when a refresh token is malformed, expired, unknown or superseded.

    Kept apart from :class:`AuthenticationFailedError` so clients know to drop
    their session and ask for a full sign-in instead of retrying.
    """

    status = 401
    code = "invalid_refresh_token"

    def __init__(self, message: str = "Refresh token is no longer valid. Please sign in.") -> None:
        super().__init__(message)


@dataclass(eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity or a pending verification entry does not exist.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    :param error_code: Specific machine code; defaults to ``<entity>_not_found``.
    :type error_code: str | None
    """

    entity: str
    key: str | int
    error_code: str | None = None

    status = 404

    def __post_init__(self) -> None:
        ServiceError.__init__(
            self,
            f"{self.entity} not found: {self.key}",
            code=self.error_code or f"{self.entity.lower().replace(' ', '_')}_not_found",
        )

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


class StoreUnavailableError(ServiceError):
    """Raised when the session store cannot be reached."""

    status = 503
    code = "store_unavailable"

    def __init__(self, message: str = "Session store unavailable") -> None:
        super().__init__(message)


class MailUnavailableError(ServiceError):
    """Raised when the mail relay refuses or cannot be reached."""

    status = 503
    code = "mail_unavailable"

    def __init__(self, message: str = "Mail delivery unavailable") -> None:
        super().__init__(message)
