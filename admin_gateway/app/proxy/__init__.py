"""
Proxy Package
=============

Forwards dashboard requests to the upstream API and normalizes every answer
into the response envelope.

Main Components:
----------------
- adapter.py: ProxyRoute, forward() and the URL/body helpers
- routes.py: route table and the router factory (/api/<resource>)

Usage:
------
    from admin_gateway.app.proxy import proxy_router
    app.include_router(proxy_router, prefix="/api")
"""

from .adapter import ProxyRoute, forward, normalize_base_url
from .routes import ROUTES, create_proxy_router, proxy_router

__all__ = [
    "ProxyRoute",
    "ROUTES",
    "create_proxy_router",
    "forward",
    "normalize_base_url",
    "proxy_router",
]
