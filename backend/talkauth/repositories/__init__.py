"""Repository package exposing persistence-layer access for the credential store."""

from __future__ import annotations

from talkauth.repositories.account import AccountRepository
from talkauth.repositories.base import BaseRepository

__all__ = ["BaseRepository", "AccountRepository"]
