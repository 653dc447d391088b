# classy_backend/schemas/message.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel

FormCategory = Literal["contact", "custom"]


class ContactSubmission(SQLModel):
    """
    Contact / custom request form fields (parsed from multipart form data).
    """

    name: str
    email: str
    phone: str | None = None
    type: str | None = None
    preference: str | None = None
    message: str | None = None
    custom_message: str | None = None
    form_category: FormCategory = "contact"

    @property
    def is_custom(self) -> bool:
        return self.form_category == "custom"

    @property
    def body(self) -> str | None:
        return self.custom_message if self.is_custom else self.message


class ContactResult(SQLModel):
    success: bool = True
    notified: bool


class MessageRead(SQLModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str | None
    preference: str | None
    type: str | None
    message: str | None
    custom_message: str | None
    form_category: str
    has_file: bool
    submitted_at: datetime


class CustomPhotoRead(SQLModel):
    id: uuid.UUID
    image_url: str
    created_at: datetime
