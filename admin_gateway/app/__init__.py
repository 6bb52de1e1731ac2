"""
Admin Gateway Application
=========================

Subpackages:
    - auth: session cookie handling
    - proxy: upstream request forwarding and response envelopes
    - dashboard: list/form page logic and location autocomplete

The ASGI application lives in ``admin_gateway.app.main``.
"""
