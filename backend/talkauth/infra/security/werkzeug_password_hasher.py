from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from talkauth.services._shared.ports import PasswordHasher


@dataclass(slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted one-way hashing via :mod:`werkzeug.security`.

    :param method: Werkzeug method string (``"scrypt"``, ``"pbkdf2:sha256:600000"``...).
    :param salt_length: Salt length passed to ``generate_password_hash``.
    """

    method: str = "scrypt"
    salt_length: int = 16

    def hash(self, raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(raw, method=self.method, salt_length=self.salt_length)

    def verify(self, hashed: str, raw: str) -> bool:
        if not hashed or not raw:
            return False
        # ``check_password_hash`` compares with ``hmac.compare_digest``
        return bool(check_password_hash(hashed, raw))
