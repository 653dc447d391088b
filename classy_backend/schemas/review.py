# classy_backend/schemas/review.py
import uuid

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ReviewCreate(SQLModel):
    """
    Checkout feedback: rating 1 (very hard) .. 5 (very easy).
    """

    model_config = ConfigDict(extra="forbid")

    session_id: str = Field(max_length=255)
    rating: int = Field(ge=1, le=5)
    comments: str = Field(default="", max_length=2000)

    @field_validator("session_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("session_id cannot be empty")
        return v


class ReviewCreated(SQLModel):
    success: bool = True
    review_id: uuid.UUID
