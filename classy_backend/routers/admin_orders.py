# classy_backend/routers/admin_orders.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from classy_backend.core.auth import resolve_admin_actor
from classy_backend.database import get_session
from classy_backend.schemas.admin_log import AdminLogList
from classy_backend.schemas.order import (
    OrderActionResult,
    OrderList,
    OrderRead,
    TrackingUpdate,
)
from classy_backend.routers.orders import admin_log_repo, get_order_service
from classy_backend.services.admin_log_service import AdminActionLogger
from classy_backend.services.order_service import OrderService

router = APIRouter(prefix="/admin", tags=["Admin Orders"])

audit_log = AdminActionLogger(admin_log_repo)


# -------- Views --------


@router.get(
    "/orders",
    response_model=OrderList,
    dependencies=[Depends(resolve_admin_actor)],
)
def list_unshipped_orders(
    session: Session = Depends(get_session),
    service: OrderService = Depends(get_order_service),
):
    """Orders waiting to ship, newest first."""
    return service.list_unshipped(session)


@router.get(
    "/orders/shipped",
    response_model=OrderList,
    dependencies=[Depends(resolve_admin_actor)],
)
def list_shipped_orders(
    session: Session = Depends(get_session),
    service: OrderService = Depends(get_order_service),
):
    """Shipped but not yet delivered, most recently shipped first."""
    return service.list_shipped_undelivered(session)


@router.get(
    "/orders/delivered",
    response_model=OrderList,
    dependencies=[Depends(resolve_admin_actor)],
)
def list_delivered_orders(
    session: Session = Depends(get_session),
    service: OrderService = Depends(get_order_service),
):
    return service.list_delivered(session)


@router.get(
    "/orders/archived",
    response_model=OrderList,
    dependencies=[Depends(resolve_admin_actor)],
)
def list_archived_orders(
    session: Session = Depends(get_session),
    service: OrderService = Depends(get_order_service),
):
    return service.list_archived(session)


@router.get(
    "/orders/{order_id}",
    response_model=OrderRead,
    dependencies=[Depends(resolve_admin_actor)],
)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
    service: OrderService = Depends(get_order_service),
):
    """
    Single order by its checkout session id.
    """
    return service.get_order(session, order_id)


# -------- Transitions --------
# order_id is the Stripe checkout session id.


@router.post("/orders/{order_id}/shipped", response_model=OrderActionResult)
def mark_shipped(
    order_id: str,
    session: Session = Depends(get_session),
    actor: str = Depends(resolve_admin_actor),
    service: OrderService = Depends(get_order_service),
):
    """
    Mark an order shipped and email the customer.
    Calling it again re-stamps shipped_at and re-sends the email.
    """
    return OrderActionResult(order=service.mark_shipped(session, order_id, actor))


@router.post("/orders/{order_id}/delivered", response_model=OrderActionResult)
def mark_delivered(
    order_id: str,
    session: Session = Depends(get_session),
    actor: str = Depends(resolve_admin_actor),
    service: OrderService = Depends(get_order_service),
):
    """
    Mark an order delivered and email the customer.
    Does not require the order to be shipped first.
    """
    return OrderActionResult(order=service.mark_delivered(session, order_id, actor))


@router.post("/orders/{order_id}/tracking", response_model=OrderActionResult)
def update_tracking(
    order_id: str,
    payload: TrackingUpdate,
    session: Session = Depends(get_session),
    actor: str = Depends(resolve_admin_actor),
    service: OrderService = Depends(get_order_service),
):
    """
    Set tracking number / carrier and email the customer.

    The email carries a tracking link for USPS, UPS and FedEx only.
    """
    return OrderActionResult(order=service.update_tracking(session, order_id, payload, actor))


@router.post("/orders/{order_id}/archive", response_model=OrderActionResult)
def archive_order(
    order_id: str,
    session: Session = Depends(get_session),
    actor: str = Depends(resolve_admin_actor),
    service: OrderService = Depends(get_order_service),
):
    return OrderActionResult(order=service.archive(session, order_id, actor))


@router.post("/orders/{order_id}/restore", response_model=OrderActionResult)
def restore_order(
    order_id: str,
    session: Session = Depends(get_session),
    actor: str = Depends(resolve_admin_actor),
    service: OrderService = Depends(get_order_service),
):
    return OrderActionResult(order=service.restore(session, order_id, actor))


# -------- Audit trail --------


@router.get(
    "/logs",
    response_model=AdminLogList,
    dependencies=[Depends(resolve_admin_actor)],
)
def list_admin_logs(
    order_id: str | None = None,
    skip: int = 0,
    limit: int = 200,
    session: Session = Depends(get_session),
):
    """
    Admin action history, newest first.

    - `order_id` narrows to one order.
    - Each entry carries the order's short number (null if the order is gone).
    """
    return audit_log.list_logs(session, order_id=order_id, skip=skip, limit=limit)
