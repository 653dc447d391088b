# classy_backend/services/webhook_service.py
import logging
from decimal import Decimal
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from classy_backend.core.stripe_client import StripeGateway, WebhookVerificationError
from classy_backend.models.order import Order
from classy_backend.repositories.order_repo import OrderRepository
from classy_backend.services.checkout_service import ADDRESS_FIELDS, unpack_items
from classy_backend.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def order_number_for(session_id: str) -> str:
    """Short human-friendly reference derived from the session id."""
    return session_id[-8:].upper()


class PaymentCompletionHandler:
    """
    Turns Stripe "checkout.session.completed" webhooks into Orders.

    Stripe delivers webhooks at least once and in any order, so this is
    the only place an Order is created and it is idempotent per session:
      1. verify the signature (400 on failure, nothing written)
      2. ignore every other event type
      3. skip if an order already exists for the session id
      4. insert; a unique-index violation from a concurrent duplicate is
         rolled back and treated as the same benign skip
      5. send the confirmation email (best-effort) only after step 4 wins
    """

    def __init__(
        self,
        gateway: StripeGateway,
        order_repo: OrderRepository,
        notifier: NotificationService,
    ):
        self.gateway = gateway
        self.order_repo = order_repo
        self.notifier = notifier

    def handle(self, session: Session, payload: bytes, signature: str | None) -> dict[str, bool]:
        try:
            event = self.gateway.verify_event(payload, signature)
        except WebhookVerificationError as exc:
            logger.warning("Rejected webhook: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Webhook Error: {exc}",
            )

        event_type = event.get("type")
        logger.info("Stripe event received: %s (%s)", event_type, event.get("id"))

        if event_type != CHECKOUT_COMPLETED:
            logger.info("Ignoring Stripe event type %s", event_type)
            return {"received": True}

        checkout = (event.get("data") or {}).get("object") or {}
        if not checkout.get("id"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Webhook Error: checkout session id missing",
            )

        self.record_order(session, checkout)
        return {"received": True}

    def record_order(self, session: Session, checkout: dict[str, Any]) -> Order | None:
        """
        Insert the Order for a completed checkout session.

        Returns the new Order, or None when the session was already recorded.
        Database errors other than the duplicate case propagate so the
        webhook answers 500 and Stripe retries.
        """
        session_id = checkout["id"]

        existing = self.order_repo.get_by_session_id(session, session_id)
        if existing:
            logger.info("Order for session %s already exists; skipping insert", session_id)
            return None

        order = self.build_order(checkout)
        try:
            self.order_repo.create_order(session, order)
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info("Concurrent delivery already stored session %s; skipping", session_id)
            return None

        session.refresh(order)
        logger.info("Order %s saved for session %s", order.order_number, session_id)

        self.notifier.send_order_confirmation(order)
        return order

    @staticmethod
    def build_order(checkout: dict[str, Any]) -> Order:
        """
        Map a Checkout Session object onto a new Order.

        The session metadata written at checkout carries the customer,
        address and item snapshot; customer_details is the fallback for
        name/email when metadata is incomplete.
        """
        metadata: dict[str, str] = checkout.get("metadata") or {}
        details: dict[str, Any] = checkout.get("customer_details") or {}

        customer_name = metadata.get("customer_name") or details.get("name") or "Customer"
        customer_email = (
            metadata.get("customer_email")
            or details.get("email")
            or checkout.get("customer_email")
            or ""
        )
        customer_address = metadata.get("customer_address") or "N/A"

        address = {field: metadata.get(f"address_{field}") or None for field in ADDRESS_FIELDS}
        if not any(address.values()):
            address = None

        try:
            items = unpack_items(metadata)
        except ValueError:
            logger.warning("Unreadable item metadata on session %s", checkout.get("id"))
            items = []

        amount_total = checkout.get("amount_total") or 0
        amount = float(Decimal(int(amount_total)) / 100)

        return Order(
            stripe_session_id=checkout["id"],
            order_number=order_number_for(checkout["id"]),
            customer_name=customer_name,
            customer_email=customer_email,
            customer_address=customer_address,
            address=address,
            notes=metadata.get("notes") or None,
            items=items,
            amount=amount,
            currency=checkout.get("currency") or "usd",
            payment_status=checkout.get("payment_status") or "unpaid",
        )
