# classy_backend/models/message.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class ContactMessage(SQLModel, table=True):
    """
    Contact form or custom-jewelry request.

    form_category: "contact" | "custom"
    """

    __tablename__ = "messages"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str
    email: str = Field(index=True)
    phone: str | None = None
    preference: str | None = Field(
        default=None,
        description="Preferred contact channel",
    )
    type: str | None = Field(
        default=None,
        description="Jewelry type for custom requests",
    )
    message: str | None = None
    custom_message: str | None = None
    form_category: str = Field(default="contact")
    has_file: bool = False

    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )


class CustomPhoto(SQLModel, table=True):
    """Gallery photo of a past custom piece, shown on the custom-order page."""

    __tablename__ = "custom_photos"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    image_url: str

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
