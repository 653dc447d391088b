# classy_backend/routers/checkout.py
from fastapi import APIRouter, Depends, Request

from classy_backend.core.config import get_settings
from classy_backend.core.stripe_client import StripeGateway, get_payment_gateway
from classy_backend.schemas.checkout import CheckoutRequest, CheckoutSessionRead
from classy_backend.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


def get_checkout_service(
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> CheckoutService:
    return CheckoutService(gateway, get_settings().STRIPE_CURRENCY)


@router.post("", response_model=CheckoutSessionRead)
def create_checkout_session(
    payload: CheckoutRequest,
    request: Request,
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Start a hosted Stripe checkout for the client-side cart.

    - Public endpoint (guest checkout).
    - No order is written here; the webhook records it once paid.
    - Redirect URLs are built from the `Origin` header, else SITE_URL.
    """
    origin = request.headers.get("origin") or get_settings().SITE_URL
    return service.create_session(payload, origin)
