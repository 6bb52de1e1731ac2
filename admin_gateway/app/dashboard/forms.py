"""
Form schemas for the dashboard create/edit pages.

Each form is a Pydantic model holding the validation rules of one page.
``validate_form`` runs a schema against raw form values and returns either
the parsed form or inline errors keyed by field name; a page only submits
when there are no errors.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Generic, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from ..models import Coordinates

F = TypeVar("F", bound="DashboardForm")


class DashboardForm(BaseModel):
    """Base for all form schemas."""

    model_config = ConfigDict(str_strip_whitespace=True)

    # Inline message shown for any error on the field, overriding Pydantic's text.
    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {}

    def to_payload(self) -> Dict[str, Any]:
        """JSON body sent through the gateway."""
        return self.model_dump(mode="json", exclude_none=True)


# ============================================================================
# Plans
# ============================================================================

class PlanServiceChoice(BaseModel):
    serviceId: str
    name: str


class PlanForm(DashboardForm):
    name: str = Field(..., min_length=1)
    description: Optional[str] = ""
    price: float = Field(0, ge=0)
    currency: Literal["INR", "USD"] = "INR"
    validity_days: int = Field(30, ge=1)
    weight_limit_kg: float = Field(10, ge=1)
    pickups_per_month: int = Field(8, ge=1)
    features: List[str] = Field(default_factory=list)
    services: List[PlanServiceChoice] = Field(default_factory=list)
    extra_kg_rate: float = Field(50, ge=0)
    rollover_limit_months: int = Field(1, ge=0)
    is_active: bool = True

    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {
        "name": "Plan name is required",
        "price": "Price must be greater than 0",
        "validity_days": "Duration required",
        "weight_limit_kg": "Weight limit required",
        "pickups_per_month": "Pickups required",
        "extra_kg_rate": "Extra rate required",
        "rollover_limit_months": "Rollover limit must be 0 or more",
    }

    @field_validator(
        "price",
        "validity_days",
        "weight_limit_kg",
        "pickups_per_month",
        "extra_kg_rate",
        "rollover_limit_months",
        mode="before",
    )
    @classmethod
    def blank_number_to_zero(cls, v: Any) -> Any:
        """An emptied number input reads as 0, then the minimums apply."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v

    def toggle_service(self, service_id: str, name: str, selected: bool) -> None:
        """Add or remove a service from the plan's included services."""
        current = [s for s in self.services if s.serviceId != service_id]
        if selected:
            current.append(PlanServiceChoice(serviceId=service_id, name=name))
        self.services = current


# ============================================================================
# Users
# ============================================================================

class UserForm(DashboardForm):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    role: str = Field(..., min_length=1)
    password: Optional[str] = None
    is_active: bool = True

    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {
        "name": "Name is required",
        "email": "Enter a valid email",
        "role": "Role is required",
    }

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        # A blank password on the edit page means "unchanged".
        if not payload.get("password"):
            payload.pop("password", None)
        return payload


# ============================================================================
# Vendors
# ============================================================================

class VendorForm(DashboardForm):
    company_name: str = Field(..., min_length=1)
    location: str = ""
    phone_number: str = Field(..., min_length=1)
    services: List[str] = Field(default_factory=list)
    location_coordinates: Coordinates = Field(default_factory=Coordinates)

    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {
        "company_name": "Company name is required",
        "phone_number": "Phone number is required",
    }

    @field_validator("services")
    @classmethod
    def drop_blank_services(cls, v: List[str]) -> List[str]:
        """The form always shows one empty service row; never send it."""
        return [s.strip() for s in v if s and s.strip()]


# ============================================================================
# Delivery partners
# ============================================================================

class DeliveryPartnerForm(DashboardForm):
    company_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    is_active: bool = True

    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {
        "company_name": "Company name is required",
        "location": "Location is required",
        "phone_number": "Phone number is required",
    }


# ============================================================================
# Orders
# ============================================================================

class OrderUpdateForm(DashboardForm):
    # Other order fields are passed through to the upstream untouched.
    model_config = ConfigDict(str_strip_whitespace=True, extra="allow")

    status: str = Field(..., min_length=1)

    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {
        "status": "Status is required",
    }


class VendorOrderStatusForm(DashboardForm):
    status: str = Field(..., min_length=1)
    note: Optional[str] = None

    FIELD_MESSAGES: ClassVar[Dict[str, str]] = {
        "status": "Status is required",
    }


# ============================================================================
# Validation
# ============================================================================

@dataclass
class FormResult(Generic[F]):
    form: Optional[F] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.form is not None and not self.errors


def validate_form(schema: Type[F], values: Mapping[str, Any]) -> FormResult[F]:
    """
    Validate raw form values against a schema.

    Returns:
        FormResult with the parsed form, or with the first error message
        of every invalid field (dotted names for nested fields)
    """
    try:
        return FormResult(form=schema.model_validate(dict(values)))
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            loc = ".".join(str(part) for part in error["loc"]) or "__root__"
            top = str(error["loc"][0]) if error["loc"] else loc
            if loc not in errors:
                errors[loc] = schema.FIELD_MESSAGES.get(top, error["msg"])
        return FormResult(errors=errors)
