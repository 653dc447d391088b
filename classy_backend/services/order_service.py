# classy_backend/services/order_service.py
import logging
import math
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from classy_backend.models.order import Order
from classy_backend.repositories.order_repo import OrderRepository
from classy_backend.schemas.admin_log import AdminAction
from classy_backend.schemas.order import (
    OrderList,
    OrderPage,
    OrderRead,
    TrackingUpdate,
)
from classy_backend.services.admin_log_service import AdminActionLogger
from classy_backend.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

ORDERS_PER_PAGE = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderService:
    """
    Order lifecycle: admin transitions and read views.

    Lifecycle flags are independent booleans. Transitions:
      - mark_shipped     shipped=True, shipped_at=now        (email)
      - mark_delivered   delivered=True, delivered_at=now    (email)
      - update_tracking  tracking_number/carrier/updated_at  (email)
      - archive          archived=True, archived_at=now
      - restore          archived=False, archived_at=None

    None of them check the other flags, so "deliver before ship" and
    repeated calls are allowed; a repeat re-stamps the timestamp and
    re-sends the email.

    Each transition and its AdminLogEntry are committed in one transaction.
    Emails go out only after the commit succeeds.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        admin_logger: AdminActionLogger,
        notifier: NotificationService,
    ):
        self.order_repo = order_repo
        self.admin_logger = admin_logger
        self.notifier = notifier

    # -------- Helpers --------

    def _get_or_404(self, session: Session, order_id: str) -> Order:
        order = self.order_repo.get_by_session_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _commit_transition(
        self,
        session: Session,
        order: Order,
        action: AdminAction,
        performed_by: str | None,
    ) -> Order:
        self.order_repo.update_order(session, order)
        self.admin_logger.append(session, order.stripe_session_id, action, performed_by)
        session.commit()
        session.refresh(order)
        return order

    @staticmethod
    def _to_read(order: Order) -> OrderRead:
        return OrderRead.model_validate(order, from_attributes=True)

    def _to_list(self, orders: list[Order]) -> OrderList:
        return OrderList(orders=[self._to_read(o) for o in orders])

    # -------- Transitions --------

    def mark_shipped(self, session: Session, order_id: str, performed_by: str | None) -> OrderRead:
        order = self._get_or_404(session, order_id)
        order.shipped = True
        order.shipped_at = _utcnow()
        order = self._commit_transition(session, order, "shipped", performed_by)

        self.notifier.send_shipped(order)
        return self._to_read(order)

    def mark_delivered(self, session: Session, order_id: str, performed_by: str | None) -> OrderRead:
        order = self._get_or_404(session, order_id)
        order.delivered = True
        order.delivered_at = _utcnow()
        order = self._commit_transition(session, order, "delivered", performed_by)

        self.notifier.send_delivered(order)
        return self._to_read(order)

    def update_tracking(
        self,
        session: Session,
        order_id: str,
        payload: TrackingUpdate,
        performed_by: str | None,
    ) -> OrderRead:
        """
        Attach a tracking number. Unknown carriers are stored as given; the
        customer email then shows the raw number without a link.
        """
        order = self._get_or_404(session, order_id)
        order.tracking_number = payload.tracking_number
        order.carrier = payload.carrier or ""
        order.tracking_updated_at = _utcnow()
        order = self._commit_transition(session, order, "tracking", performed_by)

        self.notifier.send_tracking(order)
        return self._to_read(order)

    def archive(self, session: Session, order_id: str, performed_by: str | None) -> OrderRead:
        order = self._get_or_404(session, order_id)
        order.archived = True
        order.archived_at = _utcnow()
        order = self._commit_transition(session, order, "archive", performed_by)
        return self._to_read(order)

    def restore(self, session: Session, order_id: str, performed_by: str | None) -> OrderRead:
        order = self._get_or_404(session, order_id)
        order.archived = False
        order.archived_at = None
        order = self._commit_transition(session, order, "restore", performed_by)
        return self._to_read(order)

    # -------- Read views --------

    def get_order(self, session: Session, order_id: str) -> OrderRead:
        return self._to_read(self._get_or_404(session, order_id))

    def list_for_customer(
        self,
        session: Session,
        email: str,
        page: int = 1,
        shipped: bool | None = None,
    ) -> OrderPage:
        """
        Newest-first order history for one customer, ORDERS_PER_PAGE per page.
        """
        if page < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="page must be >= 1",
            )

        total = self.order_repo.count_for_customer(session, email, shipped)
        orders = self.order_repo.list_for_customer(
            session,
            email,
            shipped=shipped,
            skip=(page - 1) * ORDERS_PER_PAGE,
            limit=ORDERS_PER_PAGE,
        )
        return OrderPage(
            orders=[self._to_read(o) for o in orders],
            page=page,
            total_pages=math.ceil(total / ORDERS_PER_PAGE),
            total=total,
        )

    def list_unshipped(self, session: Session) -> OrderList:
        return self._to_list(self.order_repo.list_unshipped(session))

    def list_shipped_undelivered(self, session: Session) -> OrderList:
        return self._to_list(self.order_repo.list_shipped_undelivered(session))

    def list_delivered(self, session: Session) -> OrderList:
        return self._to_list(self.order_repo.list_delivered(session))

    def list_archived(self, session: Session) -> OrderList:
        return self._to_list(self.order_repo.list_archived(session))
