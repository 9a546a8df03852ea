from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """One-way, salted password hashing. Implementations compare in constant time."""

    def hash(self, raw: str) -> str: ...

    def verify(self, hashed: str, raw: str) -> bool: ...
