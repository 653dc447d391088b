# classy_backend/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from classy_backend.core.auth import require_auth
from classy_backend.core.config import get_settings
from classy_backend.database import get_session
from classy_backend.models.user import User
from classy_backend.repositories.admin_log_repo import AdminLogRepository
from classy_backend.repositories.order_repo import OrderRepository
from classy_backend.schemas.order import OrderPage
from classy_backend.services.admin_log_service import AdminActionLogger
from classy_backend.services.notification_service import NotificationService, get_notifier
from classy_backend.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
admin_log_repo = AdminLogRepository()


def get_order_service(
    notifier: NotificationService = Depends(get_notifier),
) -> OrderService:
    admin_logger = AdminActionLogger(admin_log_repo, get_settings().ADMIN_FALLBACK_IDENTITY)
    return OrderService(order_repo, admin_logger, notifier)


@router.get("/me", response_model=OrderPage)
def list_my_orders(
    page: int = Query(default=1, ge=1),
    shipped: bool | None = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: OrderService = Depends(get_order_service),
):
    """
    Order history of the authenticated customer, newest first.

    - Matched on the account email (orders are placed as guests).
    - `shipped=true|false` narrows to shipped / not yet shipped orders.
    """
    return service.list_for_customer(session, current_user.email, page=page, shipped=shipped)
