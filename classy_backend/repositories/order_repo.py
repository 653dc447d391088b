# classy_backend/repositories/order_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from classy_backend.models.order import Order


class OrderRepository:
    """
    Data access layer for orders.

    NOTE:
      - No commits here; a lifecycle transition and its audit entry are
        written in one transaction. The service calls session.commit().
    """

    # ---- Lookups ----

    def get_by_session_id(self, session: Session, stripe_session_id: str) -> Order | None:
        stmt = select(Order).where(Order.stripe_session_id == stripe_session_id)
        return session.exec(stmt).first()

    def list_for_customer(
        self,
        session: Session,
        email: str,
        shipped: bool | None = None,
        skip: int = 0,
        limit: int = 5,
    ) -> list[Order]:
        stmt = select(Order).where(Order.customer_email == email)
        if shipped is not None:
            stmt = stmt.where(Order.shipped == shipped)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count_for_customer(
        self,
        session: Session,
        email: str,
        shipped: bool | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.customer_email == email)
        if shipped is not None:
            stmt = stmt.where(Order.shipped == shipped)
        return int(session.exec(stmt).one() or 0)

    # ---- Admin views (filters over the one orders table) ----

    def list_unshipped(self, session: Session) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.shipped == False)  # noqa: E712
            .order_by(Order.created_at.desc())
        )
        return session.exec(stmt).all()

    def list_shipped_undelivered(self, session: Session) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.shipped == True, Order.delivered == False)  # noqa: E712
            .order_by(Order.shipped_at.desc())
        )
        return session.exec(stmt).all()

    def list_delivered(self, session: Session) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.delivered == True)  # noqa: E712
            .order_by(Order.delivered_at.desc())
        )
        return session.exec(stmt).all()

    def list_archived(self, session: Session) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.archived == True)  # noqa: E712
            .order_by(Order.archived_at.desc())
        )
        return session.exec(stmt).all()

    # ---- Writes ----

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing.

        Raises:
            sqlalchemy.exc.IntegrityError: stripe_session_id already stored.
        """
        session.add(order)
        session.flush()
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order
