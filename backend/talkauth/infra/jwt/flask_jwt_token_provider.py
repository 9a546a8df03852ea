# talkauth/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from talkauth.services._shared.ports import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenInfo,
    TokenProvider,
    TokenVerificationError,
)


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended (HS256 JWTs signed with ``JWT_SECRET_KEY``).

    Every token gets a random ``jti`` from the library, so two tokens minted
    for the same subject in the same second still differ.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def mint(
        self,
        *,
        subject_id: str,
        token_type: str,
        ttl: timedelta,
        claims: Mapping[str, Any] | None = None,
    ) -> str:
        extra = dict(claims or {})
        if token_type == ACCESS_TOKEN_TYPE:
            token = create_access_token(
                identity=subject_id, additional_claims=extra, expires_delta=ttl
            )
        elif token_type == REFRESH_TOKEN_TYPE:
            token = create_refresh_token(
                identity=subject_id, additional_claims=extra, expires_delta=ttl
            )
        else:
            raise ValueError(f"Unknown token type: {token_type!r}")
        return cast(str, token)

    def verify(
        self,
        token: str,
        *,
        expected_type: str | None = None,
        allow_expired: bool = False,
    ) -> TokenInfo:
        if not token:
            raise TokenVerificationError("malformed", "Token is empty")
        try:
            payload = cast(dict[str, Any], decode_token(token, allow_expired=allow_expired))
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenVerificationError("expired") from exc
        except pyjwt.InvalidSignatureError as exc:
            raise TokenVerificationError("bad_signature") from exc
        except (pyjwt.PyJWTError, JWTExtendedException) as exc:
            raise TokenVerificationError("malformed") from exc

        token_type = payload.get("type", ACCESS_TOKEN_TYPE)
        if expected_type is not None and token_type != expected_type:
            raise TokenVerificationError("wrong_type")

        subject = payload.get("sub")
        exp = payload.get("exp")
        if not isinstance(subject, str) or not subject or not isinstance(exp, int | float):
            raise TokenVerificationError("malformed")

        roles = payload.get("roles") or ()
        if isinstance(roles, str):
            roles = (roles,)

        return TokenInfo(
            expiration_epoch_millis=int(exp * 1000),
            subject_id=subject,
            token_type=token_type,
            jti=payload.get("jti"),
            roles=tuple(str(r) for r in roles),
            nickname=payload.get("nickname"),
        )
