"""
Proxy Adapter
=============

Translates one inbound dashboard request into one upstream API request and
normalizes the outcome into the response envelope::

    {"success": true,  "data": ..., "message": "..."}
    {"success": false, "message": "...", "error": ...}

Every resource/verb pair of the gateway is the same call to ``forward()``
with a different ``ProxyRoute``. The adapter never lets an exception cross
its boundary and never retries: each failure is reported to the caller
immediately with a status code.

Checks run in this order, before any network call:
    1. upstream base URL configured, else 500
    2. session token present, else 401
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from ..config import Settings
from ..models import Envelope

logger = logging.getLogger(__name__)

# Non-JSON upstream bodies are kept only as a short diagnostic preview.
RAW_PREVIEW_LIMIT = 200

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


# ============================================================================
# Errors
# ============================================================================

class ProxyError(Exception):
    """Base class for failures converted to an envelope at the adapter boundary."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error: Any = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.error = error
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_envelope(self) -> Envelope:
        if self.error is None:
            return Envelope.fail(self.message)
        return Envelope.fail(self.message, error=self.error)


class ConfigurationError(ProxyError):
    """The upstream base URL is not configured."""

    status_code = 500
    default_message = "Server configuration error"


class AuthorizationError(ProxyError):
    """No session token on the inbound request."""

    status_code = 401
    default_message = "Unauthorized"


class UpstreamError(ProxyError):
    """The upstream answered with a non-2xx status."""


# ============================================================================
# Route description
# ============================================================================

@dataclass(frozen=True)
class ProxyRoute:
    """
    One resource/verb pair exposed by the gateway.

    Attributes:
        name: Route name (used for logging and FastAPI route names)
        method: HTTP method, forwarded unchanged
        path: Path template shared by the local route and the upstream call,
            e.g. ``/vendor-orders/{id}/status``
        success_message: Confirmation placed in the envelope on success
        unwrap: Keys tried in order to pull the payload out of a successful
            upstream body; the whole body is used when none is present
        public_fallback: Whether the route may fall back to the public
            base URL when the main upstream URL is not configured
    """

    name: str
    method: str
    path: str
    success_message: str
    unwrap: Tuple[str, ...] = ("data",)
    public_fallback: bool = False

    @property
    def sends_body(self) -> bool:
        return self.method.upper() in BODY_METHODS


# ============================================================================
# Helpers
# ============================================================================

def normalize_base_url(base_url: str) -> str:
    """
    Make sure the base URL ends with exactly one ``/api`` segment.

    >>> normalize_base_url("https://api.example.com/")
    'https://api.example.com/api'
    >>> normalize_base_url("https://api.example.com/api")
    'https://api.example.com/api'
    """
    stripped = base_url.rstrip("/")
    if stripped.endswith("/api"):
        return stripped
    return f"{stripped}/api"


def resolve_base_url(route: ProxyRoute, settings: Settings) -> str:
    """
    Pick and normalize the upstream base URL for a route.

    Raises:
        ConfigurationError: If no base URL is configured for the route
    """
    base_url = settings.RINSR_API_BASE
    if not base_url and route.public_fallback:
        base_url = settings.RINSR_PUBLIC_API_BASE

    if not base_url:
        raise ConfigurationError()

    return normalize_base_url(base_url)


def build_upstream_url(base_url: str, path: str, path_params: Mapping[str, Any]) -> str:
    """Substitute URL-quoted identifiers into the path template."""
    quoted = {key: quote(str(value), safe="") for key, value in path_params.items()}
    try:
        return base_url + path.format(**quoted)
    except KeyError as e:
        raise ProxyError(f"Missing path parameter: {e.args[0]}") from e


def build_upstream_headers(token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def parse_upstream_body(text: str) -> Any:
    """
    Parse an upstream body read as text.

    Returns the decoded JSON value, ``{}`` for an empty body, or
    ``{"raw": <first 200 chars>}`` when the body is not JSON.
    """
    if not text.strip():
        return {}

    try:
        return json.loads(text)
    except ValueError:
        logger.error(
            "Failed to parse JSON from upstream",
            extra={"preview": text[:RAW_PREVIEW_LIMIT]},
        )
        return {"raw": text[:RAW_PREVIEW_LIMIT]}


def unwrap_payload(body: Any, keys: Sequence[str]) -> Any:
    if isinstance(body, dict):
        for key in keys:
            if body.get(key) is not None:
                return body[key]
    return body


def upstream_message(body: Any, status_code: int) -> str:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return f"Upstream request failed: {status_code}"


# ============================================================================
# Adapter
# ============================================================================

async def forward(
    route: ProxyRoute,
    *,
    settings: Settings,
    client: httpx.AsyncClient,
    token: Optional[str],
    path_params: Optional[Mapping[str, Any]] = None,
    query_params: Optional[Sequence[Tuple[str, str]]] = None,
    read_body: Optional[Callable[[], Awaitable[Any]]] = None,
) -> Tuple[int, Envelope]:
    """
    Forward one request upstream and normalize the result.

    Args:
        route: Route description (method, path template, unwrap keys)
        settings: Settings built at startup
        client: Shared HTTP client for upstream calls
        token: Bearer token from the session cookie, or None
        path_params: Identifiers substituted into the path template
        query_params: Query string items forwarded unchanged
        read_body: Awaitable returning the inbound JSON body; only called
            for POST/PUT/PATCH routes and only after both checks passed

    Returns:
        (status_code, envelope); never raises
    """
    try:
        base_url = resolve_base_url(route, settings)

        if not token:
            raise AuthorizationError()

        url = build_upstream_url(base_url, route.path, path_params or {})

        content = None
        if route.sends_body and read_body is not None:
            content = json.dumps(await read_body())

        logger.info(
            f"Proxying {route.method} to {url}",
            extra={"route": route.name},
        )

        response = await client.request(
            route.method,
            url,
            headers=build_upstream_headers(token),
            content=content,
            params=list(query_params) if query_params else None,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            follow_redirects=True,
        )

        body = parse_upstream_body(response.text)

        logger.info(
            f"Upstream responded {response.status_code}",
            extra={"route": route.name, "status_code": response.status_code},
        )

        if not response.is_success:
            logger.warning(
                f"Upstream error: {response.status_code}",
                extra={"route": route.name, "status_code": response.status_code},
            )
            raise UpstreamError(
                upstream_message(body, response.status_code),
                error=body,
                status_code=response.status_code,
            )

        return 200, Envelope.ok(unwrap_payload(body, route.unwrap), route.success_message)

    except ProxyError as e:
        return e.status_code, e.to_envelope()

    except Exception as e:
        logger.error(
            f"{route.method} {route.path} failed: {e!r}",
            exc_info=not isinstance(e, httpx.HTTPError),
            extra={"route": route.name},
        )
        return 500, Envelope.fail("Internal server error", error=str(e) or type(e).__name__)
