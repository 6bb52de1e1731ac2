"""
Session Token Module
====================

Reads the upstream bearer token from the session cookie.

The token is issued by the upstream API's own login flow and stored in a
cookie by the dashboard. The gateway only relays it: it never creates,
refreshes, decodes or validates the token. Route handlers receive the token
as an explicit parameter through the ``get_session_token`` dependency and
pass it on to the proxy adapter.
"""

import logging
from typing import Optional

from fastapi import Request

from ..config import Settings

logger = logging.getLogger(__name__)


def read_token_from_cookies(cookies, cookie_name: str) -> Optional[str]:
    """
    Extract the bearer token from a cookie mapping.

    Args:
        cookies: Mapping of cookie name to value (e.g. ``request.cookies``)
        cookie_name: Name of the session cookie

    Returns:
        The token string, or None when the cookie is absent or blank
    """
    value = cookies.get(cookie_name)
    if value is None:
        return None

    value = value.strip()
    if not value:
        return None

    # Some clients store the header form in the cookie.
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()

    return value or None


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the Settings built at startup."""
    return request.app.state.settings


async def get_session_token(request: Request) -> Optional[str]:
    """
    FastAPI dependency returning the session token for this request.

    Missing tokens are not rejected here; the proxy adapter turns a None
    token into the 401 envelope after checking configuration first.

    Usage in routes:
        @router.get("/things")
        async def things(token: Optional[str] = Depends(get_session_token)):
            ...
    """
    settings = get_app_settings(request)
    token = read_token_from_cookies(request.cookies, settings.SESSION_COOKIE_NAME)

    if token is None:
        logger.debug(
            "No session cookie on request",
            extra={"path": request.url.path, "cookie_name": settings.SESSION_COOKIE_NAME},
        )

    return token


__all__ = [
    "get_app_settings",
    "get_session_token",
    "read_token_from_cookies",
]
