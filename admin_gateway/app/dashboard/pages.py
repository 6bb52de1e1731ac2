"""
Dashboard page controllers.

Each dashboard page is either a table (``ListPage``) or a create/edit form
(``FormPage``). Pages only talk to the gateway's ``/api`` routes through a
``DashboardClient``; they keep the last fetched data in memory and report
the outcome of a mutation as a ``Feedback`` (toast or dialog) that the UI
shows. Any envelope without ``success: true`` is a failure, and its
``message`` is what the admin sees. Nothing is retried.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

import httpx
from pydantic import BaseModel, ValidationError

from ..models import (
    Customer,
    DeliveryPartner,
    Envelope,
    Order,
    Plan,
    Service,
    User,
    Vendor,
    VendorOrder,
)
from .forms import (
    DashboardForm,
    DeliveryPartnerForm,
    OrderUpdateForm,
    PlanForm,
    PlanServiceChoice,
    UserForm,
    VendorForm,
    VendorOrderStatusForm,
    validate_form,
)
from .geocoding import Suggestion
from .listing import DEFAULT_PAGE_SIZE, ListView, PageSlice

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong!"


# ============================================================================
# Gateway client
# ============================================================================

class DashboardClient:
    """
    Calls the gateway's ``/api`` routes on behalf of a logged-in admin.

    Args:
        client: HTTP client whose base URL points at the gateway
        token: Session token to send as the session cookie
        cookie_name: Name of the session cookie
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: Optional[str] = None,
        cookie_name: str = "rinsr_token",
    ):
        self.client = client
        self.token = token
        self.cookie_name = cookie_name

    def _headers(self) -> Dict[str, str]:
        # Sent per request so clients sharing one httpx client keep their own session.
        if not self.token:
            return {}
        return {"Cookie": f"{self.cookie_name}={self.token}"}

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Envelope:
        """
        Issue one gateway call and return its envelope.

        Raises:
            httpx.HTTPError: If the gateway cannot be reached
        """
        response = await self.client.request(
            method,
            f"/api{path}",
            json=json,
            params=params,
            headers=self._headers(),
        )

        try:
            body = response.json()
        except ValueError:
            return Envelope.fail(f"Unexpected response from gateway: {response.status_code}")

        if not isinstance(body, dict) or "success" not in body:
            return Envelope.fail(f"Unexpected response from gateway: {response.status_code}")

        try:
            return Envelope.model_validate(body)
        except ValidationError:
            return Envelope.fail(f"Unexpected response from gateway: {response.status_code}")


@dataclass
class Feedback:
    """Transient outcome shown to the admin after an action."""

    success: bool
    title: str
    message: str
    kind: str = "toast"
    redirect_to: Optional[str] = None


def extract_collection(data: Any, keys: Sequence[str]) -> List[Any]:
    """Find the list of rows in a gateway payload."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []


# ============================================================================
# List pages
# ============================================================================

@dataclass(frozen=True)
class ListPageDefinition:
    title: str
    path: str
    model: Type[BaseModel]
    search_fields: Tuple[str, ...]
    collection_keys: Tuple[str, ...] = ("data", "items", "results")


class ListPage:
    """
    A table page: fetch once, then search and paginate in memory.
    """

    def __init__(self, definition: ListPageDefinition, api: DashboardClient, per_page: int = DEFAULT_PAGE_SIZE):
        self.definition = definition
        self.api = api
        self.view: ListView = ListView(definition.search_fields, per_page=per_page)
        self.loading = False
        self.error: Optional[str] = None

    async def load(self, params: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Fetch the collection through the gateway.

        On failure the table is emptied and ``error`` holds the message.
        """
        self.loading = True
        self.error = None
        try:
            envelope = await self.api.request("GET", self.definition.path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching {self.definition.title.lower()}: {e}")
            envelope = Envelope.fail(GENERIC_ERROR)
        finally:
            self.loading = False

        if not envelope.success:
            self.error = envelope.message
            self.view.set_items([])
            return False

        rows = extract_collection(envelope.data, self.definition.collection_keys)
        self.view.set_items(self._parse(rows))
        return True

    def _parse(self, rows: List[Any]) -> List[BaseModel]:
        parsed = []
        for row in rows:
            try:
                parsed.append(self.definition.model.model_validate(row))
            except ValidationError:
                logger.warning(f"Skipping malformed row in {self.definition.title.lower()}")
        return parsed

    def search(self, term: str) -> None:
        self.view.set_search(term)

    def current(self) -> PageSlice:
        return self.view.current()

    @property
    def summary(self) -> str:
        return f"{self.view.total} total {self.definition.title.lower()} found."


USERS_PAGE = ListPageDefinition("Users", "/users", User, ("name", "email", "phone"), ("users", "data"))
PLANS_PAGE = ListPageDefinition("Plans", "/plans", Plan, ("name", "description"), ("plans", "data"))
VENDORS_PAGE = ListPageDefinition(
    "Vendors", "/vendors", Vendor, ("company_name", "location", "phone_number"), ("vendors", "data")
)
DELIVERY_PARTNERS_PAGE = ListPageDefinition(
    "Delivery partners",
    "/delivery-partners",
    DeliveryPartner,
    ("company_name", "location", "phone_number"),
    ("deliveryPartners", "delivery_partners", "partners", "data"),
)
ORDERS_PAGE = ListPageDefinition(
    "Orders",
    "/orders",
    Order,
    ("id", "status", "customer.name", "vendor.company_name"),
    ("orders", "data"),
)
VENDOR_ORDERS_PAGE = ListPageDefinition(
    "Vendor orders",
    "/vendor-orders",
    VendorOrder,
    ("id", "status", "customer.name", "vendor.company_name"),
    ("vendorOrders", "vendor_orders", "orders", "data"),
)
SERVICES_PAGE = ListPageDefinition("Services", "/services", Service, ("name",), ("services", "data"))
CUSTOMERS_PAGE = ListPageDefinition(
    "Customers", "/customers", Customer, ("name", "email", "phone"), ("customers", "data")
)


# ============================================================================
# Form pages
# ============================================================================

@dataclass(frozen=True)
class FormPageDefinition:
    title: str
    schema: Type[DashboardForm]
    method: str
    path: str
    success_message: str
    failure_message: str
    redirect_to: Optional[str] = None
    kind: str = "toast"
    detail_path: Optional[str] = None
    detail_keys: Tuple[str, ...] = ()


class FormPage:
    """
    A create or edit form.

    Edit pages load the current values first (``load``); ``submit``
    validates and only calls the gateway when validation passed.
    """

    def __init__(self, definition: FormPageDefinition, api: DashboardClient, entity_id: Optional[str] = None):
        self.definition = definition
        self.api = api
        self.entity_id = entity_id
        self.initial: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.saving = False

    def _path(self, template: str) -> str:
        if "{id}" in template:
            if not self.entity_id:
                raise ValueError(f"{self.definition.title} needs an entity id")
            return template.format(id=self.entity_id)
        return template

    async def load(self) -> Optional[Feedback]:
        """
        Fetch the entity being edited.

        Returns:
            None on success, or a failure Feedback to show
        """
        if not self.definition.detail_path:
            return None

        try:
            envelope = await self.api.request("GET", self._path(self.definition.detail_path))
        except httpx.HTTPError as e:
            logger.error(f"Error loading {self.definition.title.lower()}: {e}")
            return Feedback(False, "Error", GENERIC_ERROR, kind=self.definition.kind)

        if not envelope.success:
            return Feedback(False, "Error", envelope.message, kind=self.definition.kind)

        data = envelope.data
        if isinstance(data, dict):
            for key in self.definition.detail_keys:
                if isinstance(data.get(key), dict):
                    data = data[key]
                    break
            self.initial = dict(data)
        return None

    async def submit(self, values: Mapping[str, Any]) -> Optional[Feedback]:
        """
        Validate and send the form.

        Returns:
            None when validation failed (see ``errors``), else the Feedback
        """
        result = validate_form(self.definition.schema, values)
        self.errors = result.errors
        if not result.ok:
            return None

        self.saving = True
        try:
            envelope = await self.api.request(
                self.definition.method,
                self._path(self.definition.path),
                json=result.form.to_payload(),
            )
        except httpx.HTTPError as e:
            logger.error(f"Error submitting {self.definition.title.lower()}: {e}")
            return Feedback(False, "Error", GENERIC_ERROR, kind=self.definition.kind)
        finally:
            self.saving = False

        if envelope.success:
            return Feedback(
                True,
                "Success",
                self.definition.success_message,
                kind=self.definition.kind,
                redirect_to=self.definition.redirect_to,
            )

        return Feedback(
            False,
            "Error",
            envelope.message or self.definition.failure_message,
            kind=self.definition.kind,
        )


CREATE_PLAN_FORM = FormPageDefinition(
    "Create New Plan",
    PlanForm,
    "POST",
    "/plans",
    "Plan created successfully!",
    "Failed to create plan.",
    redirect_to="/dashboard/plans",
    kind="dialog",
)
EDIT_PLAN_FORM = FormPageDefinition(
    "Edit Plan",
    PlanForm,
    "PUT",
    "/plans/{id}",
    "Plan updated successfully!",
    "Failed to update plan.",
    redirect_to="/dashboard/plans",
    kind="dialog",
    detail_path="/plans/{id}",
    detail_keys=("plan",),
)
EDIT_USER_FORM = FormPageDefinition(
    "Edit User",
    UserForm,
    "PATCH",
    "/users/{id}",
    "User updated successfully!",
    "Failed to update user.",
    redirect_to="/dashboard/users",
    kind="dialog",
    detail_path="/users/{id}",
    detail_keys=("user",),
)
CREATE_VENDOR_FORM = FormPageDefinition(
    "Create Vendor",
    VendorForm,
    "POST",
    "/vendors",
    "Vendor created successfully!",
    "Failed to create vendor.",
    kind="dialog",
)
EDIT_VENDOR_FORM = FormPageDefinition(
    "Edit Vendor",
    VendorForm,
    "PUT",
    "/vendors/{id}",
    "Vendor updated successfully",
    "Update failed",
    redirect_to="/dashboard/vendors",
    detail_path="/vendors/{id}",
    detail_keys=("vendor",),
)
CREATE_DELIVERY_PARTNER_FORM = FormPageDefinition(
    "Add Delivery Partner",
    DeliveryPartnerForm,
    "POST",
    "/delivery-partners",
    "Delivery partner created successfully",
    "Failed to create delivery partner",
    redirect_to="/dashboard/delivery-partners",
)
EDIT_DELIVERY_PARTNER_FORM = FormPageDefinition(
    "Edit Delivery Partner",
    DeliveryPartnerForm,
    "PUT",
    "/delivery-partners/{id}",
    "Delivery partner updated successfully",
    "Failed to update delivery partner",
    redirect_to="/dashboard/delivery-partners",
    detail_path="/delivery-partners/{id}",
    detail_keys=("deliveryPartner", "partner"),
)
UPDATE_ORDER_FORM = FormPageDefinition(
    "Update Order",
    OrderUpdateForm,
    "PUT",
    "/orders/{id}",
    "Order updated successfully",
    "Failed to update order",
    redirect_to="/dashboard/orders",
    detail_path="/orders/{id}",
    detail_keys=("order",),
)
UPDATE_VENDOR_ORDER_STATUS_FORM = FormPageDefinition(
    "Update Vendor Order Status",
    VendorOrderStatusForm,
    "PATCH",
    "/vendor-orders/{id}/status",
    "Status updated successfully",
    "Failed to update status",
    redirect_to="/dashboard/vendor-orders",
    detail_path="/vendor-orders/{id}",
    detail_keys=("order", "vendorOrder"),
)


# ============================================================================
# Page-specific helpers
# ============================================================================

async def load_plan_service_choices(api: DashboardClient) -> List[PlanServiceChoice]:
    """Services offered as checkboxes on the plan form."""
    page = ListPage(SERVICES_PAGE, api, per_page=50)
    if not await page.load():
        logger.error(f"Invalid services response: {page.error}")
        return []
    return [PlanServiceChoice(serviceId=s.id, name=s.name) for s in page.view.items]


def apply_suggestion(values: Mapping[str, Any], suggestion: Suggestion) -> Dict[str, Any]:
    """Fill the vendor form's location fields from a picked suggestion."""
    updated = dict(values)
    updated["location"] = suggestion.display_name
    updated["location_coordinates"] = suggestion.coordinates.model_dump()
    return updated
