# talkauth/services/auth/service.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from talkauth.core.logger import token_fingerprint
from talkauth.models.account import Account, Role
from talkauth.repositories.account import AccountRepository
from talkauth.services._shared.base import BaseService, ServiceContext
from talkauth.services._shared.errors import (
    AuthenticationFailedError,
    InvalidRefreshTokenError,
    NotFoundError,
    ValidationConflictError,
)
from talkauth.services._shared.ports import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    PasswordHasher,
    RotationResult,
    SessionStore,
    TokenDenylistStore,
    TokenInfo,
    TokenProvider,
    TokenVerificationError,
)
from talkauth.services.auth.dto import (
    AccountOut,
    AuthTokenConfig,
    DeleteAccountIn,
    LogoutIn,
    Principal,
    RefreshIn,
    SignInIn,
    SignInOut,
    SignUpIn,
    TokenPairOut,
)

log = logging.getLogger(__name__)

# Single message for every uniqueness collision; the colliding field is not disclosed.
CONFLICT_MESSAGE = "account, nickname or email already in use"
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_ACCESS_TOKEN = "Invalid access token"


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Sign-up, sign-in, refresh with rotation, logout, per-request token
    validation and account deletion. Tokens come from a pluggable
    :class:`TokenProvider`; the single live refresh session per account sits in
    a :class:`SessionStore`; early access-token revocation goes through a
    :class:`TokenDenylistStore`.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        session_store: SessionStore,
        denylist_store: TokenDenylistStore,
        password_hasher: PasswordHasher,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for minting/verifying tokens.
        :param session_store: One refresh session per subject (atomic rotation).
        :param denylist_store: Denylist for access tokens (JTI-based).
        :param password_hasher: One-way password hashing.
        :param token_cfg: Access/Refresh lifetime configuration.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.sessions = session_store
        self.denylist = denylist_store
        self.passwords = password_hasher
        self.cfg = token_cfg or AuthTokenConfig()
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Sign-up
    # ------------------------------------------------------------------ #

    def sign_up(self, dto: SignUpIn) -> AccountOut:
        """
        Create an account with a hashed password and the default role.

        No token is issued; sign-in is a separate step.

        :param dto: Sign-up input.
        :returns: Public view of the new account.
        :raises ValidationConflictError: If account id, nickname or email is taken.
        """
        password_hash = self.passwords.hash(dto.password)
        email = dto.email.strip().lower()

        try:
            with self.rw_uow() as uow:
                repo: AccountRepository = uow.accounts
                if (
                    repo.exists_by_account_id(dto.account_id)
                    or repo.exists_by_nickname(dto.nickname)
                    or repo.exists_by_email(email)
                ):
                    raise ValidationConflictError(CONFLICT_MESSAGE)

                account = repo.model(
                    account_id=dto.account_id,
                    password_hash=password_hash,
                    display_name=dto.display_name,
                    nickname=dto.nickname,
                    email=email,
                    role=Role.USER,
                    gender=dto.gender,
                    birth_date=dto.birth_date,
                )
                repo.add(account)
                out = self._to_account_out(account)
        except IntegrityError as exc:
            # Lost a race against a concurrent sign-up with the same keys
            raise ValidationConflictError(CONFLICT_MESSAGE) from exc

        log.info("Account created", extra={"subject_id": out.account_id})
        return out

    def check_account_available(self, account_id: str) -> None:
        """
        :raises ValidationConflictError: If ``account_id`` is already registered.
        """
        with self.ro_uow() as uow:
            taken = uow.accounts.exists_by_account_id(account_id)
        if taken:
            raise ValidationConflictError("account already in use")

    def check_nickname_available(self, nickname: str) -> None:
        """
        :raises ValidationConflictError: If ``nickname`` is already registered.
        """
        with self.ro_uow() as uow:
            taken = uow.accounts.exists_by_nickname(nickname)
        if taken:
            raise ValidationConflictError("nickname already in use")

    # ------------------------------------------------------------------ #
    # Sign-in
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn) -> SignInOut:
        """
        Authenticate credentials and issue a fresh token pair.

        The new refresh token overwrites any previous session record for the
        account, so at most one refresh token is live per subject.

        :param dto: Sign-in input.
        :returns: Token pair plus nickname.
        :raises AuthenticationFailedError: On unknown account or wrong password.
        """
        with self.ro_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_by_account_id(dto.account_id)
            if account is None:
                self._burn_password_check(dto.password)
                verified = False
            else:
                verified = self.passwords.verify(account.password_hash, dto.password)

            if not verified or account is None:
                log.warning("Sign-in rejected", extra={"reason": "bad_credentials"})
                raise AuthenticationFailedError(INVALID_CREDENTIALS)

            subject_id = account.account_id
            roles = (Role(account.role).authority,)
            nickname = account.nickname

        tokens = self._issue_pair(subject_id, roles, nickname)
        self.sessions.save(
            subject_id=subject_id,
            refresh_token=tokens.refresh_token,
            roles=roles,
            ttl=self.cfg.refresh_expires,
        )

        log.info("Signed in", extra={"subject_id": subject_id})
        return SignInOut(tokens=tokens, nickname=nickname)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange a refresh token for a new pair and retire the old one.

        Security
        --------
        - The token must verify (signature, expiry, ``type == "refresh"``).
        - It must be the exact token recorded for the subject; a superseded
          token fails even while its signature is still valid.
        - Replacement is a compare-and-set in the store, so two concurrent
          refreshes with the same token cannot both succeed.

        :param dto: Refresh input.
        :returns: New token pair.
        :raises InvalidRefreshTokenError: On any verification or match failure.
        """
        presented = dto.refresh_token
        try:
            info = self.tokens.verify(presented, expected_type=REFRESH_TOKEN_TYPE)
        except TokenVerificationError as exc:
            log.warning(
                "Refresh rejected",
                extra={"reason": exc.reason, "token_fp": token_fingerprint(presented)},
            )
            raise InvalidRefreshTokenError() from exc

        subject_id = info.subject_id
        with self.ro_uow() as uow:
            account = uow.accounts.get_by_account_id(subject_id)
            if account is not None:
                roles = (Role(account.role).authority,)
                nickname = account.nickname

        if account is None:
            # Account vanished after sign-in; its session must not outlive it
            self.sessions.delete(subject_id)
            log.warning(
                "Refresh rejected", extra={"subject_id": subject_id, "reason": "account_missing"}
            )
            raise InvalidRefreshTokenError()

        tokens = self._issue_pair(subject_id, roles, nickname)
        result = self.sessions.rotate(
            subject_id=subject_id,
            presented_token=presented,
            new_token=tokens.refresh_token,
            roles=roles,
            ttl=self.cfg.refresh_expires,
        )
        if result is not RotationResult.OK:
            log.warning(
                "Refresh rejected",
                extra={"subject_id": subject_id, "reason": result.name.lower()},
            )
            raise InvalidRefreshTokenError()

        return tokens

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke an access token and drop the subject's refresh session.

        Idempotent: undecodable, forged or already-revoked tokens are a no-op.
        Expired tokens still end the session but get no denylist entry.
        """
        token = dto.access_token
        try:
            info = self.tokens.verify(token, expected_type=ACCESS_TOKEN_TYPE, allow_expired=True)
        except TokenVerificationError as exc:
            log.info(
                "Logout ignored",
                extra={"reason": exc.reason, "token_fp": token_fingerprint(token)},
            )
            return

        if info.jti is not None and self.denylist.is_revoked(info.jti):
            return

        self._revoke_access(info)
        self.sessions.delete(info.subject_id)
        log.info("Signed out", extra={"subject_id": info.subject_id})

    # ------------------------------------------------------------------ #
    # Per-request validation
    # ------------------------------------------------------------------ #

    def authenticate(self, access_token: str) -> Principal:
        """
        Validate an access token: signature and expiry first, then revocation.

        :param access_token: Bearer token from the request.
        :returns: The authenticated principal.
        :raises AuthenticationFailedError: If either check fails.
        """
        try:
            info = self.tokens.verify(access_token, expected_type=ACCESS_TOKEN_TYPE)
        except TokenVerificationError as exc:
            log.info("Access token rejected", extra={"reason": exc.reason})
            raise AuthenticationFailedError(INVALID_ACCESS_TOKEN) from exc

        if info.is_expired() or info.jti is None or self.denylist.is_revoked(info.jti):
            log.info(
                "Access token rejected",
                extra={"subject_id": info.subject_id, "reason": "revoked"},
            )
            raise AuthenticationFailedError(INVALID_ACCESS_TOKEN)

        return Principal(subject_id=info.subject_id, roles=info.roles, nickname=info.nickname)

    # ------------------------------------------------------------------ #
    # Account deletion
    # ------------------------------------------------------------------ #

    def delete_account(self, dto: DeleteAccountIn) -> None:
        """
        Delete an account and cut off its sessions.

        The refresh session is removed so no further refresh succeeds. When
        the caller passes its current access token it is revoked as well;
        other outstanding access tokens stay usable until their own expiry
        (bounded by the access TTL).

        :param dto: Deletion input.
        :raises NotFoundError: If the account does not exist (``account_not_found``).
        """
        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_by_account_id(dto.subject_id)
            if account is None:
                raise NotFoundError("Account", dto.subject_id)
            repo.delete(account)

        self.sessions.delete(dto.subject_id)

        if dto.access_token:
            try:
                info = self.tokens.verify(
                    dto.access_token, expected_type=ACCESS_TOKEN_TYPE, allow_expired=True
                )
            except TokenVerificationError:
                info = None
            if info is not None and info.subject_id == dto.subject_id:
                self._revoke_access(info)

        log.info("Account deleted", extra={"subject_id": dto.subject_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, subject_id: str, roles: tuple[str, ...], nickname: str) -> TokenPairOut:
        access_claims: dict[str, Any] = {"roles": list(roles), "nickname": nickname}
        access = self.tokens.mint(
            subject_id=subject_id,
            token_type=ACCESS_TOKEN_TYPE,
            ttl=self.cfg.access_expires,
            claims=access_claims,
        )
        refresh = self.tokens.mint(
            subject_id=subject_id,
            token_type=REFRESH_TOKEN_TYPE,
            ttl=self.cfg.refresh_expires,
        )
        return TokenPairOut(access_token=access, refresh_token=refresh)

    def _revoke_access(self, info: TokenInfo) -> None:
        """Denylist ``info.jti`` for its remaining lifetime; expired tokens need nothing."""
        if info.jti is None or info.is_expired():
            return
        self.denylist.revoke_jti(jti=info.jti, expires_at=info.expires_at)

    def _burn_password_check(self, raw: str) -> None:
        """Verify against a throwaway hash so unknown accounts cost as much as known ones."""
        if self._dummy_hash is None:
            self._dummy_hash = self.passwords.hash("talkauth-timing-equalizer")
        self.passwords.verify(self._dummy_hash, raw or "x")

    @staticmethod
    def _to_account_out(account: Account) -> AccountOut:
        return AccountOut(
            account_id=account.account_id,
            display_name=account.display_name,
            nickname=account.nickname,
            email=account.email,
            role=Role(account.role),
        )
