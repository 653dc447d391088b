# classy_backend/core/stripe_client.py
import json
from functools import lru_cache
from typing import Any

import stripe

from classy_backend.core.config import get_settings

# Stripe rejects signatures whose timestamp is older than this (seconds)
SIGNATURE_TOLERANCE = 300


class WebhookVerificationError(Exception):
    """Raised when a webhook payload cannot be trusted."""


class StripeGateway:
    """
    Thin wrapper around the Stripe SDK.

    Only two processor features are used:
      - hosted Checkout Session creation
      - webhook signature verification

    Services receive an instance through FastAPI dependencies so tests can
    swap in a fake without touching the network.
    """

    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        tolerance: int = SIGNATURE_TOLERANCE,
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def create_checkout_session(self, **params: Any) -> stripe.checkout.Session:
        """
        Create a hosted Checkout Session.

        Raises:
            stripe.StripeError: network failure, bad API key, invalid params.
        """
        return stripe.checkout.Session.create(api_key=self.api_key, **params)

    def verify_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Verify the `Stripe-Signature` header against the raw body and return
        the decoded event.

        Raises:
            WebhookVerificationError: missing/invalid signature or body.
        """
        if not signature:
            raise WebhookVerificationError("Missing Stripe-Signature header")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookVerificationError("Payload is not valid UTF-8") from exc

        try:
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                self.webhook_secret,
                self.tolerance,
            )
        except stripe.SignatureVerificationError as exc:
            raise WebhookVerificationError(str(exc)) from exc

        try:
            event = json.loads(body)
        except ValueError as exc:
            raise WebhookVerificationError("Payload is not valid JSON") from exc

        if not isinstance(event, dict) or "type" not in event:
            raise WebhookVerificationError("Payload is not a Stripe event")
        return event


@lru_cache
def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency returning the configured Stripe gateway."""
    settings = get_settings()
    return StripeGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)
