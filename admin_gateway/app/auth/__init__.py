"""
Authentication Package

The admin gateway does not authenticate anyone itself. The dashboard logs in
against the upstream API, which hands back a bearer token that is kept in a
cookie. This package only reads that cookie so the token can be relayed
upstream.

Modules:
- session: cookie token extraction and the related FastAPI dependencies
"""

from .session import get_app_settings, get_session_token, read_token_from_cookies

__all__ = [
    "get_app_settings",
    "get_session_token",
    "read_token_from_cookies",
]
