# classy_backend/repositories/admin_log_repo.py
from sqlmodel import Session, select

from classy_backend.models.admin_log import AdminLogEntry
from classy_backend.models.order import Order


class AdminLogRepository:
    """
    Append-only access to admin_logs.

    There is intentionally no update/delete.
    """

    def append(self, session: Session, entry: AdminLogEntry) -> AdminLogEntry:
        """Stage an entry in the caller's transaction (no commit)."""
        session.add(entry)
        session.flush()
        return entry

    def list_for_order(self, session: Session, order_id: str) -> list[AdminLogEntry]:
        """Entries for one order in insertion order."""
        stmt = (
            select(AdminLogEntry)
            .where(AdminLogEntry.order_id == order_id)
            .order_by(AdminLogEntry.id)
        )
        return session.exec(stmt).all()

    def list_with_order_numbers(
        self,
        session: Session,
        order_id: str | None = None,
        skip: int = 0,
        limit: int = 200,
    ) -> list[tuple[AdminLogEntry, str | None]]:
        """
        Newest-first entries joined with the order's human-friendly number.

        Entries whose order is missing still appear (outer join).
        """
        stmt = select(AdminLogEntry, Order.order_number).outerjoin(
            Order,
            Order.stripe_session_id == AdminLogEntry.order_id,
        )
        if order_id is not None:
            stmt = stmt.where(AdminLogEntry.order_id == order_id)
        stmt = (
            stmt.order_by(AdminLogEntry.timestamp.desc(), AdminLogEntry.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())
