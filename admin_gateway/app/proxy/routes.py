"""
Proxy Routes - Upstream Request Forwarding
===========================================

Registers one FastAPI route per resource/verb pair. Every route is the same
endpoint function bound to a different ``ProxyRoute``, so adding a resource
means adding a row to ``ROUTES``.

Request flow:
-------------
1. Settings and the session token are injected as dependencies
2. ``forward()`` checks configuration, then the token
3. The request is forwarded to ``<RINSR_API_BASE>/api<path>``
4. The envelope is returned with ``Cache-Control: no-store``

All routes are mounted under ``/api`` by the application factory.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..auth.session import get_app_settings, get_session_token
from ..config import Settings
from ..models import Envelope
from .adapter import ProxyRoute, forward

logger = logging.getLogger(__name__)


# ============================================================================
# Route Table
# ============================================================================

ROUTES = (
    # Users
    ProxyRoute("list_users", "GET", "/users", "Users fetched successfully"),
    ProxyRoute("create_user", "POST", "/users", "User created successfully"),
    ProxyRoute("get_user", "GET", "/users/{id}", "User fetched successfully"),
    ProxyRoute("update_user", "PATCH", "/users/{id}", "User updated successfully"),
    # Vendors
    ProxyRoute("list_vendors", "GET", "/vendors", "Vendors fetched successfully"),
    ProxyRoute("create_vendor", "POST", "/vendors", "Vendor created successfully"),
    ProxyRoute(
        "get_vendor",
        "GET",
        "/vendors/{id}",
        "Vendor fetched successfully",
        unwrap=("vendor", "data"),
        public_fallback=True,
    ),
    ProxyRoute("update_vendor", "PUT", "/vendors/{id}", "Vendor updated successfully"),
    # Vendor orders
    ProxyRoute("list_vendor_orders", "GET", "/vendor-orders", "Vendor orders fetched successfully"),
    ProxyRoute("get_vendor_order", "GET", "/vendor-orders/{id}", "Vendor order fetched successfully"),
    ProxyRoute(
        "update_vendor_order_status",
        "PATCH",
        "/vendor-orders/{id}/status",
        "Status updated successfully",
    ),
    # Orders
    ProxyRoute("list_orders", "GET", "/orders", "Orders fetched successfully"),
    ProxyRoute("get_order", "GET", "/orders/{id}", "Order fetched successfully"),
    ProxyRoute("update_order", "PUT", "/orders/{id}", "Order updated successfully"),
    # Delivery partners
    ProxyRoute("list_delivery_partners", "GET", "/delivery-partners", "Delivery partners fetched successfully"),
    ProxyRoute("create_delivery_partner", "POST", "/delivery-partners", "Delivery partner created successfully"),
    ProxyRoute("get_delivery_partner", "GET", "/delivery-partners/{id}", "Delivery partner fetched successfully"),
    ProxyRoute("update_delivery_partner", "PUT", "/delivery-partners/{id}", "Delivery partner updated successfully"),
    # Plans
    ProxyRoute("list_plans", "GET", "/plans", "Plans fetched successfully"),
    ProxyRoute("create_plan", "POST", "/plans", "Plan created successfully"),
    ProxyRoute("get_plan", "GET", "/plans/{id}", "Plan fetched successfully"),
    ProxyRoute("update_plan", "PUT", "/plans/{id}", "Plan updated successfully"),
    # Lookups
    ProxyRoute("list_services", "GET", "/services", "Services fetched successfully"),
    ProxyRoute("list_customers", "GET", "/customers", "Customers fetched successfully"),
)


# ============================================================================
# Dependencies
# ============================================================================

def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the shared upstream HTTP client from app state.

    Raises:
        HTTPException: If the client was not created (lifespan not run)
    """
    client: Optional[httpx.AsyncClient] = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Upstream client not initialized",
        )
    return client


def envelope_response(status_code: int, envelope: Envelope) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope.to_dict(),
        headers={"Cache-Control": "no-store"},
    )


# ============================================================================
# Router Factory
# ============================================================================

def _make_endpoint(route: ProxyRoute):
    async def endpoint(
        request: Request,
        settings: Settings = Depends(get_app_settings),
        token: Optional[str] = Depends(get_session_token),
        client: httpx.AsyncClient = Depends(get_upstream_client),
    ) -> JSONResponse:
        status_code, envelope = await forward(
            route,
            settings=settings,
            client=client,
            token=token,
            path_params=request.path_params,
            query_params=request.query_params.multi_items(),
            read_body=request.json,
        )
        return envelope_response(status_code, envelope)

    endpoint.__name__ = route.name
    return endpoint


def create_proxy_router(routes=ROUTES) -> APIRouter:
    """
    Build the router exposing every route of the table.

    Args:
        routes: Iterable of ProxyRoute

    Returns:
        APIRouter to be mounted under ``/api``
    """
    router = APIRouter()

    for route in routes:
        router.add_api_route(
            route.path,
            _make_endpoint(route),
            methods=[route.method],
            name=route.name,
            summary=f"{route.method} {route.path}",
            response_model=None,
        )

    logger.debug(f"Registered {len(routes)} proxy routes")
    return router


proxy_router = create_proxy_router()
