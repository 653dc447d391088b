# classy_backend/schemas/checkout.py
from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field


class CheckoutLineItem(SQLModel):
    """
    Cart line as posted by the storefront.

    Fields are lenient: lines missing a name, price or
    quantity are dropped by the service instead of failing the request.
    """

    id: str | int | None = None
    name: str | None = None
    price: float | None = None
    quantity: int | None = None
    image: str | None = None


class ShippingAddress(SQLModel):
    """Structured shipping address from the checkout form."""

    model_config = ConfigDict(extra="forbid")

    street1: str
    street2: str | None = None
    city: str
    state: str
    zip: str
    country: str = "US"

    @field_validator("street1", "city", "state", "zip", "country")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("street2")
    @classmethod
    def normalize_street2(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    def one_line(self) -> str:
        """Flatten to "street1, street2, city, state zip, country"."""
        parts = [self.street1]
        if self.street2:
            parts.append(self.street2)
        parts.append(self.city)
        parts.append(f"{self.state} {self.zip}")
        parts.append(self.country)
        return ", ".join(parts)


class CheckoutRequest(SQLModel):
    """
    Payload for starting a Stripe Checkout Session.

    User provides:
      - cart items
      - name / email
      - shipping address
      - optional notes and payment method preference
    """

    model_config = ConfigDict(extra="forbid")

    items: list[CheckoutLineItem]
    name: str = Field(max_length=100)
    email: EmailStr
    address: ShippingAddress
    notes: str | None = Field(default=None, max_length=450)
    payment_method: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("notes", "payment_method")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CheckoutSessionRead(SQLModel):
    """Redirect target for the hosted checkout page."""

    url: str
    session_id: str
