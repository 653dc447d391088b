# classy_backend/models/review.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Review(SQLModel, table=True):
    """Post-checkout feedback ("how easy was checkout?") for one session."""

    __tablename__ = "reviews"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    session_id: str = Field(
        index=True,
        description="Stripe Checkout Session id the review refers to",
    )
    rating: int = Field(ge=1, le=5)
    comments: str = ""

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
