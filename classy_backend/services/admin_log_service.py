# classy_backend/services/admin_log_service.py
import logging

from sqlmodel import Session

from classy_backend.models.admin_log import AdminLogEntry
from classy_backend.repositories.admin_log_repo import AdminLogRepository
from classy_backend.schemas.admin_log import AdminAction, AdminLogList, AdminLogRead

logger = logging.getLogger(__name__)


class AdminActionLogger:
    """
    Audit trail for admin order mutations.

    `append` stages the entry in the caller's session; it is committed
    together with the order change it records, so an order is never
    mutated without its log row (and vice versa).
    """

    def __init__(self, repo: AdminLogRepository, fallback_identity: str = "admin"):
        self.repo = repo
        self.fallback_identity = fallback_identity

    def append(
        self,
        session: Session,
        order_id: str,
        action: AdminAction,
        performed_by: str | None,
    ) -> AdminLogEntry:
        actor = (performed_by or "").strip() or self.fallback_identity
        entry = AdminLogEntry(order_id=order_id, action=action, performed_by=actor)
        self.repo.append(session, entry)
        logger.info("Admin action %s on order %s by %s", action, order_id, actor)
        return entry

    def list_logs(
        self,
        session: Session,
        order_id: str | None = None,
        skip: int = 0,
        limit: int = 200,
    ) -> AdminLogList:
        """
        Newest-first audit entries, each with the order's short number.
        """
        rows = self.repo.list_with_order_numbers(session, order_id, skip, limit)
        return AdminLogList(
            logs=[
                AdminLogRead(
                    id=entry.id,
                    order_id=entry.order_id,
                    action=entry.action,
                    performed_by=entry.performed_by,
                    timestamp=entry.timestamp,
                    order_number=order_number,
                )
                for entry, order_number in rows
            ]
        )
