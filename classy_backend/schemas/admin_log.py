# classy_backend/schemas/admin_log.py
from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel

AdminAction = Literal["archive", "restore", "shipped", "delivered", "tracking"]


class AdminLogRead(SQLModel):
    """
    Audit entry joined with the order's human-friendly number.
    """

    id: int
    order_id: str
    action: AdminAction
    performed_by: str
    timestamp: datetime
    order_number: str | None = None


class AdminLogList(SQLModel):
    logs: list[AdminLogRead]
