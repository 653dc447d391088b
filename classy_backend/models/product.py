# classy_backend/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry (ring, necklace, bracelet, watch...).

    Orders copy name/price at checkout, so editing or deleting a product
    never changes historical orders.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the piece",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str | None = None

    price: float = Field(
        gt=0,
        description="Unit price (USD)",
    )

    category: str = Field(
        max_length=50,
        index=True,
        description="Storefront category, e.g. rings, necklaces, watches",
    )

    image_url: str | None = Field(
        default=None,
        description="Public URL in Supabase Storage",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
