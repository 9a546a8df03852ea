"""Request-scoped wiring: bearer extraction, the auth interceptor and service builders."""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, TypeVar

from flask import Flask, current_app, g, request

from talkauth.core.errors import Forbidden, Unauthorized
from talkauth.core.extensions import get_redis
from talkauth.core.logger import ensure_request_id
from talkauth.infra.jwt import JWTTokenProvider
from talkauth.infra.mail import LoggingMailSender, SmtpMailSender
from talkauth.infra.redis import (
    RedisSessionStore,
    RedisTokenDenylistStore,
    RedisVerificationCodeStore,
)
from talkauth.infra.security import WerkzeugPasswordHasher
from talkauth.models.account import Role
from talkauth.services import AccountRecoveryService, AuthService, EmailVerificationService
from talkauth.services._shared.base import ServiceContext
from talkauth.services._shared.errors import AuthenticationFailedError
from talkauth.services._shared.ports import (
    MailSender,
    PasswordHasher,
    SessionStore,
    TokenDenylistStore,
    TokenProvider,
    VerificationCodeStore,
)
from talkauth.services.auth.dto import AuthTokenConfig, Principal

F = TypeVar("F", bound=Callable[..., Any])

AUTH_HEADER = "Authorization"
PORTS_EXTENSION_KEY = "talkauth.ports"


def extract_bearer_token(header: str | None) -> str | None:
    """Return the credential of a ``Bearer`` authorization header, else ``None``.

    The scheme is matched case-insensitively; empty credentials count as missing.
    """
    if not header:
        return None
    scheme, _, credentials = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = credentials.strip()
    return token or None


# ------------------------------ Service wiring ------------------------------


@dataclass(slots=True)
class ServicePorts:
    """Adapters shared by every service built for a request."""

    token_provider: TokenProvider
    session_store: SessionStore
    denylist_store: TokenDenylistStore
    code_store: VerificationCodeStore
    password_hasher: PasswordHasher
    mail_sender: MailSender


def build_mail_sender(config: Mapping[str, Any]) -> MailSender:
    """Pick the mail adapter named by ``MAIL_BACKEND`` (``log`` or ``smtp``)."""

    backend = str(config.get("MAIL_BACKEND", "log")).lower()
    if backend == "smtp":
        return SmtpMailSender(
            host=config["MAIL_SERVER"],
            port=int(config["MAIL_PORT"]),
            sender=config["MAIL_DEFAULT_SENDER"],
            use_tls=bool(config.get("MAIL_USE_TLS", False)),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
        )
    if backend == "log":
        return LoggingMailSender()
    raise RuntimeError(f"Unknown MAIL_BACKEND: {backend!r}")


def build_ports(app: Flask) -> ServicePorts:
    """Build the production adapters over the shared Redis client."""

    r = get_redis()
    return ServicePorts(
        token_provider=JWTTokenProvider(),
        session_store=RedisSessionStore(r),
        denylist_store=RedisTokenDenylistStore(r),
        code_store=RedisVerificationCodeStore(r),
        password_hasher=WerkzeugPasswordHasher(),
        mail_sender=build_mail_sender(app.config),
    )


def get_ports() -> ServicePorts:
    """Return the app's adapters, building them on first use.

    Tests install their own :class:`ServicePorts` under
    ``app.extensions["talkauth.ports"]`` before the first request.
    """

    ports = current_app.extensions.get(PORTS_EXTENSION_KEY)
    if ports is None:
        ports = build_ports(current_app)
        current_app.extensions[PORTS_EXTENSION_KEY] = ports
    return ports


def _service_context() -> ServiceContext:
    principal = g.get("principal")
    return ServiceContext(
        subject_id=principal.subject_id if principal is not None else None,
        request_id=ensure_request_id(),
    )


def get_auth_service() -> AuthService:
    ports = get_ports()
    cfg = current_app.config
    return AuthService(
        token_provider=ports.token_provider,
        session_store=ports.session_store,
        denylist_store=ports.denylist_store,
        password_hasher=ports.password_hasher,
        token_cfg=AuthTokenConfig(
            access_expires=cfg["JWT_ACCESS_TOKEN_EXPIRES"],
            refresh_expires=cfg["JWT_REFRESH_TOKEN_EXPIRES"],
        ),
        ctx=_service_context(),
    )


def get_verification_service() -> EmailVerificationService:
    ports = get_ports()
    return EmailVerificationService(
        code_store=ports.code_store,
        mail_sender=ports.mail_sender,
        code_ttl=timedelta(seconds=current_app.config["VERIFICATION_CODE_TTL"]),
        ctx=_service_context(),
    )


def get_recovery_service() -> AccountRecoveryService:
    ports = get_ports()
    return AccountRecoveryService(
        verification=get_verification_service(),
        session_store=ports.session_store,
        password_hasher=ports.password_hasher,
        grant_ttl=timedelta(seconds=current_app.config["PASSWORD_RESET_GRANT_TTL"]),
        ctx=_service_context(),
    )


# ------------------------------ Interceptors --------------------------------


def require_auth(func: F) -> F:
    """Authenticate the bearer token once and expose the principal on ``g``.

    The wrapped view reads ``g.principal`` (or :func:`current_principal`);
    ``g.access_token`` keeps the raw token for logout and account deletion.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = extract_bearer_token(request.headers.get(AUTH_HEADER))
        if token is None:
            raise Unauthorized("Missing bearer token", code="missing_token")
        service = get_auth_service()
        try:
            g.principal = service.authenticate(token)
        except AuthenticationFailedError as exc:
            raise service.translate_exceptions(exc) from exc
        g.access_token = token
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(role: Role) -> Callable[[F], F]:
    """Like :func:`require_auth`, additionally demanding ``role``."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def inner(*args: Any, **kwargs: Any):
            if not current_principal().has_role(role):
                raise Forbidden("Insufficient role")
            return func(*args, **kwargs)

        return require_auth(inner)  # type: ignore[return-value]

    return decorator


def current_principal() -> Principal:
    """Return the principal set by :func:`require_auth`."""

    principal = g.get("principal")
    if principal is None:
        raise Unauthorized("Authentication required")
    return principal
