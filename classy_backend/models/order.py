# classy_backend/models/order.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    A paid order, created only by the payment webhook.

    Identity:
      - stripe_session_id: the Checkout Session id. Unique; this index is
        what makes webhook processing idempotent under concurrent
        duplicate deliveries.
      - order_number: short human-friendly reference (absent on legacy rows).

    `items` is a frozen snapshot of [{name, quantity, price, ...}] taken at
    checkout; it never references the catalog.

    Lifecycle flags are independent booleans:
      shipped / delivered / archived (+ their *_at timestamps).
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    stripe_session_id: str = Field(
        unique=True,
        index=True,
        description="Stripe Checkout Session id",
    )
    order_number: str | None = Field(default=None, index=True)

    customer_name: str
    customer_email: str = Field(index=True)
    customer_address: str = Field(
        default="",
        description="One-line shipping address",
    )
    address: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON),
        description="Structured address: street1, street2, city, state, zip, country",
    )
    notes: str | None = None

    items: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    amount: float = Field(description="Order total in major currency units")
    currency: str = Field(default="usd")
    payment_status: str = Field(default="unpaid")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Webhook-confirmed creation timestamp (UTC)",
    )

    shipped: bool = Field(default=False, index=True)
    shipped_at: datetime | None = None

    delivered: bool = Field(default=False, index=True)
    delivered_at: datetime | None = None

    archived: bool = Field(default=False, index=True)
    archived_at: datetime | None = None

    tracking_number: str | None = None
    carrier: str | None = None
    tracking_updated_at: datetime | None = None
