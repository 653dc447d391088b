# classy_backend/services/checkout_service.py
import json
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

import stripe
from fastapi import HTTPException, status

from classy_backend.core.stripe_client import StripeGateway
from classy_backend.schemas.checkout import (
    CheckoutLineItem,
    CheckoutRequest,
    CheckoutSessionRead,
)

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street1", "street2", "city", "state", "zip", "country")

# Stripe limits: 50 metadata keys, 500 characters per value
METADATA_MAX_KEYS = 50
METADATA_VALUE_LIMIT = 500

# Storefront payment preference -> Stripe payment_method_types
PAYMENT_METHOD_TYPES: dict[str, list[str]] = {
    "card": ["card"],
    "link": ["card", "link"],
    "cashapp": ["cashapp"],
    "affirm": ["affirm"],
    "klarna": ["klarna"],
}


def to_minor_units(price: float) -> int:
    """Dollars -> cents, rounded half-up (19.995 -> 2000)."""
    cents = Decimal(str(price)) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def valid_items(items: list[CheckoutLineItem]) -> list[CheckoutLineItem]:
    """Drop lines without a name, a positive price or a positive quantity."""
    kept = []
    for item in items:
        if not item.name or not item.name.strip():
            continue
        if item.price is None or item.price <= 0:
            continue
        if item.quantity is None or item.quantity <= 0:
            continue
        kept.append(item)
    return kept


def pack_items(
    snapshot: list[dict[str, Any]],
    max_chunks: int = METADATA_MAX_KEYS,
) -> dict[str, str]:
    """
    Serialize the item snapshot into metadata values of at most 500 chars:
    "items", "items_1", "items_2", ...

    Raises:
        HTTPException(400): more than max_chunks values would be needed.
    """
    raw = json.dumps(snapshot, separators=(",", ":"))
    chunks = [
        raw[i:i + METADATA_VALUE_LIMIT]
        for i in range(0, len(raw), METADATA_VALUE_LIMIT)
    ] or ["[]"]
    if len(chunks) > max_chunks:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cart has too many items for a single checkout",
        )
    return {
        ("items" if i == 0 else f"items_{i}"): chunk
        for i, chunk in enumerate(chunks)
    }


def unpack_items(metadata: dict[str, str]) -> list[dict[str, Any]]:
    """
    Inverse of pack_items.

    Raises:
        ValueError: the concatenated chunks are not a JSON list.
    """
    if "items" not in metadata:
        return []
    parts = [metadata["items"]]
    i = 1
    while f"items_{i}" in metadata:
        parts.append(metadata[f"items_{i}"])
        i += 1
    items = json.loads("".join(parts))
    if not isinstance(items, list):
        raise ValueError("items metadata is not a list")
    return items


class CheckoutService:
    """
    Converts a cart snapshot + checkout form into a Stripe Checkout Session.

    The session metadata makes the later completion webhook self-describing
    (customer, address, notes and item snapshot), so order creation needs
    no second lookup. The cart itself is untouched here; the storefront
    clears it on the success page.
    """

    def __init__(self, gateway: StripeGateway, currency: str = "usd"):
        self.gateway = gateway
        self.currency = currency

    def _line_item(self, item: CheckoutLineItem) -> dict[str, Any]:
        product_data: dict[str, Any] = {"name": item.name.strip()}
        if item.image and item.image.startswith(("http://", "https://")):
            product_data["images"] = [item.image]
        return {
            "price_data": {
                "currency": self.currency,
                "product_data": product_data,
                "unit_amount": to_minor_units(item.price),
            },
            "quantity": item.quantity,
        }

    @staticmethod
    def _snapshot(item: CheckoutLineItem) -> dict[str, Any]:
        line: dict[str, Any] = {
            "name": item.name.strip(),
            "quantity": item.quantity,
            "price": item.price,
        }
        if item.id is not None:
            line["id"] = str(item.id)
        if item.image:
            line["image"] = item.image
        return line

    def build_metadata(self, payload: CheckoutRequest, items: list[CheckoutLineItem]) -> dict[str, str]:
        address = payload.address
        metadata = {
            "customer_name": payload.name,
            "customer_email": payload.email,
            "customer_address": address.one_line()[:METADATA_VALUE_LIMIT],
        }
        for field in ADDRESS_FIELDS:
            value = getattr(address, field)
            if value:
                metadata[f"address_{field}"] = value[:METADATA_VALUE_LIMIT]
        if payload.notes:
            metadata["notes"] = payload.notes
        if payload.payment_method:
            metadata["payment_method"] = payload.payment_method
        # Item chunks share the key limit with the customer fields above
        metadata.update(pack_items(
            [self._snapshot(i) for i in items],
            max_chunks=METADATA_MAX_KEYS - len(metadata),
        ))
        return metadata

    def create_session(self, payload: CheckoutRequest, origin: str) -> CheckoutSessionRead:
        """
        Start a hosted checkout.

        Raises:
            HTTPException(400): no usable line items.
            HTTPException(500): Stripe rejected the request.
        """
        items = valid_items(payload.items)
        if not items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        dropped = len(payload.items) - len(items)
        if dropped:
            logger.warning("Dropped %d invalid checkout line(s)", dropped)

        method_types = PAYMENT_METHOD_TYPES.get(
            (payload.payment_method or "card").lower(),
            PAYMENT_METHOD_TYPES["card"],
        )
        origin = origin.rstrip("/")

        try:
            checkout = self.gateway.create_checkout_session(
                mode="payment",
                payment_method_types=method_types,
                line_items=[self._line_item(i) for i in items],
                customer_email=payload.email,
                metadata=self.build_metadata(payload, items),
                success_url=f"{origin}/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/cart",
            )
        except stripe.StripeError as exc:
            message = exc.user_message or str(exc) or "Payment processor error"
            logger.error("Stripe checkout error: %s", message)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            )

        logger.info("Checkout session %s created for %s", checkout.id, payload.email)
        return CheckoutSessionRead(url=checkout.url, session_id=checkout.id)
