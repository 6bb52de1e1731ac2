"""
Data Models Module

This module defines Pydantic models for the response envelope and for the
entities the dashboard displays.

The entities are owned by the upstream API; these models describe the
fields the dashboard reads and keep every other field (``extra="allow"``).
They enforce nothing beyond parsing.

Models are organized by functional area:
- Envelope (every gateway response)
- Entity models (users, vendors, delivery partners, plans, orders, ...)
- System models (health)
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Envelope
# ============================================================================

class Envelope(BaseModel):
    """
    Normalized gateway response.

    Only the fields that were set are serialized, so a success envelope
    carries ``success/data/message`` and a failure envelope
    ``success/message`` plus ``error`` when there is one.
    """

    success: bool = Field(..., description="Whether the upstream call succeeded")
    data: Any = Field(None, description="Upstream payload on success")
    message: str = Field(..., description="Human-readable outcome")
    error: Any = Field(None, description="Parsed (or raw) upstream body, or the local failure cause")

    @classmethod
    def ok(cls, data: Any, message: str) -> "Envelope":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, **kwargs: Any) -> "Envelope":
        return cls(success=False, message=message, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ============================================================================
# Entity Models
# ============================================================================

class Entity(BaseModel):
    """Base for upstream documents identified by a Mongo-style ``_id``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., alias="_id", description="Upstream identifier")


class User(Entity):
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    role: Optional[str] = None
    is_active: bool = True
    createdAt: Optional[str] = None


class Coordinates(BaseModel):
    lat: float = 0.0
    lng: float = 0.0


class Vendor(Entity):
    company_name: str = ""
    location: str = ""
    phone_number: str = ""
    services: List[str] = Field(default_factory=list)
    location_coordinates: Optional[Coordinates] = None


class DeliveryPartner(Entity):
    company_name: str = ""
    location: str = ""
    phone_number: str = ""
    is_active: bool = True


class PlanService(BaseModel):
    model_config = ConfigDict(extra="allow")

    serviceId: str
    name: str


class Plan(Entity):
    name: str = ""
    description: str = ""
    price: float = 0
    currency: str = "INR"
    validity_days: int = 0
    weight_limit_kg: float = 0
    pickups_per_month: int = 0
    features: List[str] = Field(default_factory=list)
    services: List[PlanService] = Field(default_factory=list)
    extra_kg_rate: float = 0
    rollover_limit_months: int = 0
    is_active: bool = True


class Service(Entity):
    name: str = ""


class Customer(Entity):
    name: str = ""
    email: str = ""
    phone: Optional[str] = None


class Order(Entity):
    status: Optional[str] = None
    customer: Any = None
    vendor: Any = None
    total_amount: Optional[float] = None
    createdAt: Optional[str] = None


class VendorOrder(Order):
    pass


# ============================================================================
# System Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    upstream_configured: bool = Field(..., description="Whether RINSR_API_BASE is set")
