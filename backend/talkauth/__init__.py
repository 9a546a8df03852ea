"""Expose the application factory at package level.

``from talkauth import create_app`` builds a Flask app with the credential
store, token signing, the session store and JSON logging wired in.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
