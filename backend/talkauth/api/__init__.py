"""Flask-facing glue: the bearer-token interceptor and per-request service wiring."""

from __future__ import annotations

from talkauth.api.deps import (
    ServicePorts,
    current_principal,
    extract_bearer_token,
    get_auth_service,
    get_recovery_service,
    get_verification_service,
    require_auth,
    require_role,
)

__all__ = [
    "ServicePorts",
    "current_principal",
    "extract_bearer_token",
    "get_auth_service",
    "get_recovery_service",
    "get_verification_service",
    "require_auth",
    "require_role",
]
