# classy_backend/routers/webhook.py
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from classy_backend.core.stripe_client import StripeGateway, get_payment_gateway
from classy_backend.database import get_session
from classy_backend.repositories.order_repo import OrderRepository
from classy_backend.services.notification_service import NotificationService, get_notifier
from classy_backend.services.webhook_service import PaymentCompletionHandler

router = APIRouter(prefix="/webhook", tags=["Webhook"])

order_repo = OrderRepository()


def get_completion_handler(
    gateway: StripeGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notifier),
) -> PaymentCompletionHandler:
    return PaymentCompletionHandler(gateway, order_repo, notifier)


@router.post("")
async def stripe_webhook(
    request: Request,
    session: Session = Depends(get_session),
    handler: PaymentCompletionHandler = Depends(get_completion_handler),
) -> dict[str, bool]:
    """
    Stripe webhook receiver.

    The signature is computed over the exact request bytes, so the body is
    read raw instead of being parsed into a model. Order insert and the
    confirmation email block, so they run in the threadpool.
    """
    payload = await request.body()
    return await run_in_threadpool(
        handler.handle,
        session,
        payload,
        request.headers.get("stripe-signature"),
    )
