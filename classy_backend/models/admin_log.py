# classy_backend/models/admin_log.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class AdminLogEntry(SQLModel, table=True):
    """
    Append-only audit record of an admin order mutation.

    action: archive | restore | shipped | delivered | tracking

    Rows are never updated or deleted. The autoincrement id preserves
    insertion order when two entries share a timestamp.
    """

    __tablename__ = "admin_logs"

    id: int | None = Field(default=None, primary_key=True)

    order_id: str = Field(
        index=True,
        description="Order.stripe_session_id",
    )
    action: str = Field(index=True)
    performed_by: str

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
