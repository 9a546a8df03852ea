"""Generators for one-time secrets sent to account owners."""

from __future__ import annotations

import secrets

CODE_DIGITS = 6


def generate_code(digits: int = CODE_DIGITS) -> str:
    """
    Return a zero-padded numeric code drawn from a CSPRNG.

    :param digits: Number of decimal digits.
    :returns: e.g. ``"004217"`` for six digits.
    """
    if digits < 1:
        raise ValueError("digits must be positive")
    return f"{secrets.randbelow(10**digits):0{digits}d}"


def generate_reset_grant() -> str:
    """Opaque URL-safe grant handed out after a verified password-reset code."""
    return secrets.token_urlsafe(32)
