# classy_backend/schemas/cart.py
from pydantic import field_validator
from sqlmodel import SQLModel, Field


class CartItem(SQLModel):
    """
    One line of the shopper's client-side cart.

    `id` is the product identifier; a cart holds at most one line per id.
    """

    id: str
    name: str
    price: float = Field(gt=0)
    image: str | None = None
    quantity: int = Field(default=1, ge=1)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        # Catalog ids may arrive as ints from older clients
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v
