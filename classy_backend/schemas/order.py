# classy_backend/schemas/order.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class OrderLine(SQLModel):
    """
    Frozen line snapshot stored on the order.

    Older orders may carry partial lines; missing fields read as empty.
    """

    name: str = ""
    quantity: int = 0
    price: float = 0.0
    image: str | None = None


class OrderAddress(SQLModel):
    street1: str | None = None
    street2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None


class OrderRead(SQLModel):
    """
    Full order representation returned to customers and admins.
    """

    id: uuid.UUID
    stripe_session_id: str
    order_number: str | None
    customer_name: str
    customer_email: str
    customer_address: str
    address: OrderAddress | None
    notes: str | None
    items: list[OrderLine]
    amount: float
    currency: str
    payment_status: str
    created_at: datetime
    shipped: bool
    shipped_at: datetime | None
    delivered: bool
    delivered_at: datetime | None
    archived: bool
    archived_at: datetime | None
    tracking_number: str | None
    carrier: str | None
    tracking_updated_at: datetime | None


class OrderList(SQLModel):
    """Response shape `{ orders: [...] }` for admin views."""

    orders: list[OrderRead]


class OrderPage(OrderList):
    """Paginated customer order history."""

    page: int
    total_pages: int
    total: int


class OrderActionResult(SQLModel):
    """Response of an admin lifecycle transition."""

    success: bool = True
    order: OrderRead


class TrackingUpdate(SQLModel):
    """
    Admin payload to attach a tracking number.
    """

    model_config = ConfigDict(extra="forbid")

    tracking_number: str = Field(max_length=100)
    carrier: str | None = Field(default=None, max_length=50)

    @field_validator("tracking_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tracking_number cannot be empty")
        return v

    @field_validator("carrier")
    @classmethod
    def normalize_carrier(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None
