# talkauth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from talkauth.models.account import Gender, Role

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignUpIn:
    """
    Input DTO for sign-up.

    :param account_id: Requested sign-in identifier.
    :type account_id: str
    :param password: Raw password (hashed before storage).
    :type password: str
    :param display_name: Real name, used by recovery flows.
    :type display_name: str
    :param nickname: Public handle.
    :type nickname: str
    :param email: Contact address.
    :type email: str
    :param gender: Optional profile field.
    :type gender: Gender | None
    :param birth_date: Optional profile field.
    :type birth_date: datetime.date | None
    """

    account_id: str
    password: str
    display_name: str
    nickname: str
    email: str
    gender: Gender | None = None
    birth_date: date | None = None


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param account_id: Sign-in identifier.
    :type account_id: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    account_id: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param access_token: Encoded access JWT, possibly already expired.
    :type access_token: str
    """

    access_token: str


@dataclass(frozen=True, slots=True)
class DeleteAccountIn:
    """
    Input DTO for account deletion.

    :param subject_id: Account id to delete.
    :type subject_id: str
    :param access_token: The caller's current access token; revoked when given.
    :type access_token: str | None
    """

    subject_id: str
    access_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class SignInOut:
    """
    Output DTO for sign-in: the token pair plus the nickname for UI use.

    :param tokens: Freshly minted pair.
    :type tokens: TokenPairOut
    :param nickname: Account nickname.
    :type nickname: str
    """

    tokens: TokenPairOut
    nickname: str


@dataclass(frozen=True, slots=True)
class AccountOut:
    """Public-safe view of an account (no hash)."""

    account_id: str
    display_name: str
    nickname: str
    email: str
    role: Role


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller, produced once per request by the interceptor.

    :param subject_id: Account id from the verified access token.
    :type subject_id: str
    :param roles: Role authorities (``ROLE_USER``...).
    :type roles: tuple[str, ...]
    :param nickname: Nickname claim, if present.
    :type nickname: str | None
    """

    subject_id: str
    roles: tuple[str, ...] = field(default_factory=tuple)
    nickname: str | None = None

    def has_role(self, role: Role) -> bool:
        return role.authority in self.roles


# ----------------------------- Config ------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token lifetime configuration.

    :param access_expires: Access token TTL (minutes scale).
    :type access_expires: datetime.timedelta
    :param refresh_expires: Refresh token and session record TTL (days scale).
    :type refresh_expires: datetime.timedelta
    """

    access_expires: timedelta = timedelta(minutes=30)
    refresh_expires: timedelta = timedelta(days=7)
