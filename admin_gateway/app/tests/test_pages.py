"""
Dashboard Page Tests

List and form page controllers, driven against a fake gateway
(httpx.MockTransport) and once end to end through the real app.
"""

import json

import httpx
import pytest

from admin_gateway.app.dashboard.pages import (
    CREATE_PLAN_FORM,
    CREATE_VENDOR_FORM,
    EDIT_USER_FORM,
    GENERIC_ERROR,
    ORDERS_PAGE,
    USERS_PAGE,
    DashboardClient,
    FormPage,
    ListPage,
    extract_collection,
    load_plan_service_choices,
)
from admin_gateway.app.main import create_app

from .conftest import TOKEN, UPSTREAM, make_settings

GATEWAY = "http://gateway.test"


class FakeGateway:
    """Records requests and answers them from a {(method, path): response} table."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"success": False, "message": "Not Found"})
        if isinstance(response, Exception):
            raise response
        return response


def dashboard(responses, token=TOKEN):
    gateway = FakeGateway(responses)
    client = httpx.AsyncClient(transport=httpx.MockTransport(gateway), base_url=GATEWAY)
    return DashboardClient(client, token=token), gateway


def ok(data, message="ok"):
    return httpx.Response(200, json={"success": True, "data": data, "message": message})


# ============================================================================
# DashboardClient
# ============================================================================

@pytest.mark.asyncio
async def test_client_sends_session_cookie():
    api, gateway = dashboard({("GET", "/api/users"): ok([])})

    envelope = await api.request("GET", "/users")

    assert envelope.success is True
    assert f"rinsr_token={TOKEN}" in gateway.requests[0].headers["cookie"]


@pytest.mark.asyncio
async def test_clients_sharing_http_client_keep_own_session():
    gateway = FakeGateway({("GET", "/api/users"): ok([])})
    shared = httpx.AsyncClient(transport=httpx.MockTransport(gateway), base_url=GATEWAY)
    first = DashboardClient(shared, token="token-a")
    second = DashboardClient(shared, token="token-b")

    await first.request("GET", "/users")
    await second.request("GET", "/users")

    assert gateway.requests[0].headers["cookie"] == "rinsr_token=token-a"
    assert gateway.requests[1].headers["cookie"] == "rinsr_token=token-b"
    assert "rinsr_token" not in shared.cookies


@pytest.mark.asyncio
async def test_client_non_envelope_response_is_failure():
    api, _ = dashboard({("GET", "/api/users"): httpx.Response(502, text="Bad Gateway")})

    envelope = await api.request("GET", "/users")

    assert envelope.success is False
    assert envelope.message == "Unexpected response from gateway: 502"


def test_extract_collection():
    assert extract_collection([1, 2], ("users",)) == [1, 2]
    assert extract_collection({"users": [1]}, ("users", "data")) == [1]
    assert extract_collection({"count": 3}, ("users",)) == []
    assert extract_collection(None, ("users",)) == []


# ============================================================================
# List pages
# ============================================================================

@pytest.mark.asyncio
async def test_users_page_load_search_and_summary():
    users = [
        {"_id": "1", "name": "Asha", "email": "asha@rinsr.com", "phone": "9845000000"},
        {"_id": "2", "name": "Ravi", "email": "ravi@rinsr.com", "phone": None},
        {"name": "missing id"},
    ]
    api, _ = dashboard({("GET", "/api/users"): ok({"success": True, "users": users})})
    page = ListPage(USERS_PAGE, api)

    assert await page.load() is True
    assert page.error is None
    assert page.summary == "2 total users found."

    page.search("RAVI")
    assert [u.id for u in page.current().items] == ["2"]


@pytest.mark.asyncio
async def test_list_page_failure_empties_table():
    api, _ = dashboard(
        {("GET", "/api/orders"): httpx.Response(401, json={"success": False, "message": "Unauthorized"})}
    )
    page = ListPage(ORDERS_PAGE, api)
    page.view.set_items([{"_id": "stale"}])

    assert await page.load() is False
    assert page.error == "Unauthorized"
    assert page.view.items == []
    assert page.loading is False


@pytest.mark.asyncio
async def test_list_page_unreachable_gateway():
    api, _ = dashboard({("GET", "/api/orders"): httpx.ConnectError("refused")})
    page = ListPage(ORDERS_PAGE, api)

    assert await page.load() is False
    assert page.error == GENERIC_ERROR


@pytest.mark.asyncio
async def test_orders_searchable_by_customer_name():
    orders = [
        {"_id": "o1", "status": "pending", "customer": {"name": "Meera"}},
        {"_id": "o2", "status": "delivered", "customer": {"name": "Kiran"}},
    ]
    api, _ = dashboard({("GET", "/api/orders"): ok({"orders": orders})})
    page = ListPage(ORDERS_PAGE, api)
    await page.load()

    page.search("meera")

    assert [o.id for o in page.current().items] == ["o1"]


@pytest.mark.asyncio
async def test_plan_service_choices():
    services = [{"_id": "s1", "name": "Wash & Fold"}, {"_id": "s2", "name": "Dry Clean"}]
    api, _ = dashboard({("GET", "/api/services"): ok({"services": services})})

    choices = await load_plan_service_choices(api)

    assert [(c.serviceId, c.name) for c in choices] == [("s1", "Wash & Fold"), ("s2", "Dry Clean")]


# ============================================================================
# Form pages
# ============================================================================

@pytest.mark.asyncio
async def test_invalid_form_is_not_submitted():
    api, gateway = dashboard({})
    page = FormPage(CREATE_PLAN_FORM, api)

    feedback = await page.submit({"name": "", "price": -1})

    assert feedback is None
    assert page.errors["name"] == "Plan name is required"
    assert page.errors["price"] == "Price must be greater than 0"
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_create_plan_success_feedback():
    api, gateway = dashboard({("POST", "/api/plans"): ok({"_id": "p1"}, "Plan created successfully")})
    page = FormPage(CREATE_PLAN_FORM, api)

    feedback = await page.submit({"name": "Gold", "price": 999})

    assert feedback.success is True
    assert feedback.title == "Success"
    assert feedback.message == "Plan created successfully!"
    assert feedback.kind == "dialog"
    assert feedback.redirect_to == "/dashboard/plans"
    assert json.loads(gateway.requests[0].content)["name"] == "Gold"


@pytest.mark.asyncio
async def test_create_vendor_failure_shows_gateway_message():
    api, _ = dashboard(
        {
            ("POST", "/api/vendors"): httpx.Response(
                409, json={"success": False, "message": "Vendor already exists", "error": {}}
            )
        }
    )
    page = FormPage(CREATE_VENDOR_FORM, api)

    feedback = await page.submit({"company_name": "CleanCo", "phone_number": "9845000000"})

    assert feedback.success is False
    assert feedback.title == "Error"
    assert feedback.message == "Vendor already exists"
    assert feedback.redirect_to is None


@pytest.mark.asyncio
async def test_edit_user_loads_then_patches():
    user = {"_id": "u1", "name": "Asha", "email": "asha@rinsr.com", "role": "admin"}
    api, gateway = dashboard(
        {
            ("GET", "/api/users/u1"): ok({"user": user}),
            ("PATCH", "/api/users/u1"): ok(user, "User updated successfully"),
        }
    )
    page = FormPage(EDIT_USER_FORM, api, entity_id="u1")

    assert await page.load() is None
    assert page.initial["email"] == "asha@rinsr.com"

    feedback = await page.submit({**page.initial, "name": "Asha K", "password": ""})

    assert feedback.message == "User updated successfully!"
    sent = json.loads(gateway.requests[-1].content)
    assert gateway.requests[-1].method == "PATCH"
    assert sent["name"] == "Asha K"
    assert "password" not in sent


@pytest.mark.asyncio
async def test_edit_page_load_failure():
    api, _ = dashboard({})
    page = FormPage(EDIT_USER_FORM, api, entity_id="missing")

    feedback = await page.load()

    assert feedback.success is False
    assert feedback.message == "Not Found"


@pytest.mark.asyncio
async def test_submit_unreachable_gateway_shows_generic_error():
    api, _ = dashboard({("POST", "/api/plans"): httpx.ConnectError("refused")})
    page = FormPage(CREATE_PLAN_FORM, api)

    feedback = await page.submit({"name": "Gold"})

    assert feedback.success is False
    assert feedback.message == GENERIC_ERROR
    assert page.saving is False


def test_edit_page_requires_entity_id():
    api = DashboardClient(httpx.AsyncClient(base_url=GATEWAY))
    page = FormPage(EDIT_USER_FORM, api)

    with pytest.raises(ValueError):
        page._path(EDIT_USER_FORM.path)


# ============================================================================
# End to end: page -> gateway app -> mocked upstream
# ============================================================================

@pytest.mark.asyncio
async def test_create_plan_through_gateway(respx_mock):
    upstream = respx_mock.post(f"{UPSTREAM}/plans").mock(
        return_value=httpx.Response(201, json={"data": {"_id": "p9"}})
    )
    app = create_app(make_settings())

    async with httpx.AsyncClient() as upstream_client:
        app.state.http_client = upstream_client
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url=GATEWAY) as gateway_client:
            page = FormPage(CREATE_PLAN_FORM, DashboardClient(gateway_client, token=TOKEN))
            feedback = await page.submit({"name": "Gold", "price": 499, "currency": "USD"})

    assert feedback.success is True
    assert upstream.calls.last.request.headers["Authorization"] == f"Bearer {TOKEN}"
    assert json.loads(upstream.calls.last.request.content)["currency"] == "USD"
