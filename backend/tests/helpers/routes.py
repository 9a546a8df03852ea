"""Test-only blueprint exercising the auth interceptor and error handlers."""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from talkauth.api import current_principal, get_auth_service, require_auth, require_role
from talkauth.models.account import Role
from talkauth.services._shared.errors import NotFoundError, StoreUnavailableError
from talkauth.services.auth.dto import LogoutIn

bp = Blueprint("test_routes", __name__, url_prefix="/t")


@bp.get("/me")
@require_auth
def me():
    principal = current_principal()
    return jsonify(
        {
            "subject_id": principal.subject_id,
            "roles": list(principal.roles),
            "nickname": principal.nickname,
        }
    )


@bp.get("/admin")
@require_role(Role.ADMIN)
def admin_only():
    return jsonify({"ok": True})


@bp.post("/logout")
@require_auth
def logout():
    get_auth_service().logout(LogoutIn(access_token=g.access_token))
    return "", 204


@bp.get("/missing-account")
def missing_account():
    raise NotFoundError("Account", "ghost")


@bp.get("/store-down")
def store_down():
    raise StoreUnavailableError()
