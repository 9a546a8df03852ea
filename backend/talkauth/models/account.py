"""Account model: identity and credential record owned by the credential store."""

from __future__ import annotations

import enum
from datetime import date

from sqlalchemy import Date, Enum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from talkauth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

ACCOUNT_ID_MAX = 20
NICKNAME_MAX = 20
DISPLAY_NAME_MAX = 30
EMAIL_MAX = 254
PASSWORD_HASH_MAX = 256


class Role(str, enum.Enum):
    """Flat role tag carried in access tokens as ``ROLE_<name>``."""

    USER = "USER"
    ADMIN = "ADMIN"

    @property
    def authority(self) -> str:
        return f"ROLE_{self.value}"

    @classmethod
    def from_authority(cls, authority: str) -> Role:
        """
        Parse a ``ROLE_<name>`` claim back into a :class:`Role`.

        :param authority: Claim value such as ``"ROLE_USER"``.
        :type authority: str
        :returns: Matching role.
        :rtype: Role
        :raises ValueError: For unknown authorities.
        """
        return cls(authority.removeprefix("ROLE_"))


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class Account(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Credential record for a single account.

    Fields
    ------
    account_id : str
        Public sign-in identifier and token subject. Unique.
    password_hash : str
        Output of the configured password hasher. Never the raw password.
    display_name : str
        Real name used by the account recovery flows.
    nickname : str
        Public handle returned on sign-in. Unique.
    email : str
        Contact address for verification codes. Stored lowercased. Unique.
    role : Role
        Access role, ``Role.USER`` unless promoted.
    gender : Gender | None
        Optional profile field.
    birth_date : date | None
        Optional profile field.
    """

    __tablename__ = "accounts"
    __repr_attr__ = "account_id"

    account_id: Mapped[str] = mapped_column(String(ACCOUNT_ID_MAX), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(PASSWORD_HASH_MAX), nullable=False)
    display_name: Mapped[str] = mapped_column(String(DISPLAY_NAME_MAX), nullable=False)
    nickname: Mapped[str] = mapped_column(String(NICKNAME_MAX), nullable=False)
    email: Mapped[str] = mapped_column(String(EMAIL_MAX), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="account_role", native_enum=False, length=16),
        nullable=False,
        default=Role.USER,
    )
    gender: Mapped[Gender | None] = mapped_column(
        Enum(Gender, name="account_gender", native_enum=False, length=16),
        nullable=True,
    )
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint("account_id", name="uq_accounts_account_id"),
        UniqueConstraint("nickname", name="uq_accounts_nickname"),
        UniqueConstraint("email", name="uq_accounts_email"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :returns: Lowercased, trimmed email.
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; callers validate format before reaching the model.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        if len(v) > EMAIL_MAX:
            raise ValueError("Email is too long.")
        return v

    @validates("account_id", "nickname", "display_name")
    def _strip_required(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()
