# classy_backend/services/notification_service.py
import logging
from functools import lru_cache
from html import escape
from typing import Callable

from classy_backend.core.config import get_settings
from classy_backend.core.email_client import send_email
from classy_backend.models.order import Order
from classy_backend.schemas.message import ContactSubmission

logger = logging.getLogger(__name__)

SUPPORT_EMAIL = "support@classydiamonds.com"

# Public tracking pages; the tracking number is appended
CARRIER_TRACKING_URLS: dict[str, str] = {
    "USPS": "https://tools.usps.com/go/TrackConfirmAction?tLabels=",
    "UPS": "https://www.ups.com/track?loc=en_US&tracknum=",
    "FEDEX": "https://www.fedex.com/fedextrack/?trknbr=",
}

EmailSender = Callable[..., None]


def tracking_url(carrier: str | None, tracking_number: str) -> str | None:
    """
    Build a carrier tracking link, or None for unknown carriers.

    Lookup is case-insensitive ("FedEx", "fedex" and "FEDEX" all match).
    """
    if not carrier:
        return None
    base = CARRIER_TRACKING_URLS.get(carrier.strip().upper())
    if base is None:
        return None
    return f"{base}{tracking_number}"


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _order_details_html(order: Order) -> str:
    """Receipt block shared by every order email."""
    rows = []
    for item in order.items or []:
        name = escape(str(item.get("name", "")))
        quantity = int(item.get("quantity", 0))
        price = float(item.get("price", 0))
        rows.append(
            "<tr>"
            f'<td style="padding: 8px; border: 1px solid #ddd;">{name}</td>'
            f'<td style="padding: 8px; border: 1px solid #ddd;">x{quantity}</td>'
            f'<td style="padding: 8px; border: 1px solid #ddd;">{_money(price * quantity)}</td>'
            "</tr>"
        )

    order_ref = escape(order.order_number or order.stripe_session_id)
    order_date = order.created_at.strftime("%B %d, %Y %H:%M") if order.created_at else ""

    return (
        f"<p><strong>Order:</strong> #{order_ref}<br>"
        f"<strong>Order Date:</strong> {order_date}</p>"
        '<table style="width: 100%; border-collapse: collapse; margin-top: 20px;">'
        '<thead><tr style="background-color: #f2f2f2;">'
        '<th align="left" style="padding: 8px; border: 1px solid #ddd;">Item</th>'
        '<th align="left" style="padding: 8px; border: 1px solid #ddd;">Quantity</th>'
        '<th align="left" style="padding: 8px; border: 1px solid #ddd;">Subtotal</th>'
        "</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        f'<p style="margin-top: 20px;"><strong>Shipping to:</strong><br>'
        f"{escape(order.customer_address)}</p>"
        f"<p><strong>Total:</strong> {_money(order.amount)}</p>"
    )


def _wrap(title: str, body_html: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">'
        f'<h2 style="color: #1f2a44;">{title}</h2>'
        f"{body_html}"
        '<p style="margin-top: 30px; font-size: 14px;">'
        f'Questions? Contact us at <a href="mailto:{SUPPORT_EMAIL}">{SUPPORT_EMAIL}</a></p>'
        '<p style="font-size: 14px; color: #777;">Thank you for choosing Classy Diamonds.</p>'
        "</div>"
    )


class NotificationService:
    """
    Transactional emails for the order lifecycle and contact form.

    Every public method is best-effort: delivery failures are logged and
    reported as False, never raised. Notifications are a convenience, the
    order state is the source of truth.
    """

    def __init__(self, sender: EmailSender, inbox_email: str | None = None):
        self.sender = sender
        self.inbox_email = inbox_email

    def _deliver(self, to_email: str, subject: str, text_body: str, html_body: str, **extra) -> bool:
        try:
            self.sender(
                to_email=to_email,
                subject=subject,
                text_body=text_body,
                html_body=html_body,
                **extra,
            )
        except Exception:
            logger.exception("Email %r to %s failed", subject, to_email)
            return False

        logger.info("Email %r sent to %s", subject, to_email)
        return True

    # ----- Order lifecycle -----

    def send_order_confirmation(self, order: Order) -> bool:
        name = escape(order.customer_name)
        html = _wrap(
            f"Thank You for Your Order, {name}!",
            "<p>We've received your order and are getting started on it right away. "
            "Here's your receipt:</p>" + _order_details_html(order),
        )
        text = (
            f"Thank you for your order, {order.customer_name}!\n"
            f"Order #{order.order_number or order.stripe_session_id}\n"
            f"Total: {_money(order.amount)}"
        )
        return self._deliver(order.customer_email, "Your Classy Diamonds Receipt", text, html)

    def send_shipped(self, order: Order) -> bool:
        html = _wrap(
            "Your Order Has Shipped!",
            f"<p>Hi {escape(order.customer_name)},</p>"
            "<p>Your order is officially on its way!</p>" + _order_details_html(order),
        )
        text = f"Hi {order.customer_name}, your order #{order.order_number or order.stripe_session_id} has shipped."
        return self._deliver(order.customer_email, "Your Order Has Shipped!", text, html)

    def send_delivered(self, order: Order) -> bool:
        html = _wrap(
            "Your Order Has Been Delivered",
            f"<p>Hi {escape(order.customer_name)},</p>"
            "<p>Our records show your order has been delivered. We hope you love it!</p>"
            + _order_details_html(order),
        )
        text = f"Hi {order.customer_name}, your order #{order.order_number or order.stripe_session_id} was delivered."
        return self._deliver(order.customer_email, "Your Order Has Been Delivered", text, html)

    def send_tracking(self, order: Order) -> bool:
        number = order.tracking_number or ""
        link = tracking_url(order.carrier, number)

        link_html = f'<p><a href="{escape(link)}">Track Your Package</a></p>' if link else ""
        html = _wrap(
            "Your Tracking Number",
            f"<p>Hi {escape(order.customer_name)},</p>"
            "<p>Your order has been shipped. Here is your tracking number:</p>"
            f"<p><strong>{escape(number)}</strong></p>"
            f"{link_html}" + _order_details_html(order),
        )
        text = f"Tracking number: {number}"
        if link:
            text += f"\nTrack your package: {link}"
        return self._deliver(order.customer_email, "Your Tracking Number", text, html)

    # ----- Contact form -----

    def send_contact_message(
        self,
        submission: ContactSubmission,
        attachment: tuple[str, str, bytes] | None = None,
    ) -> bool:
        if not self.inbox_email:
            logger.warning("STORE_INBOX_EMAIL not configured; contact message not emailed")
            return False

        title = "New Custom Jewelry Inquiry" if submission.is_custom else "New Contact Message"
        details = [
            f"<p><strong>Name:</strong> {escape(submission.name)}</p>",
            f"<p><strong>Email:</strong> {escape(submission.email)}</p>",
            f"<p><strong>Phone:</strong> {escape(submission.phone or '')}</p>",
        ]
        if submission.type:
            details.append(f"<p><strong>Jewelry Type:</strong> {escape(submission.type)}</p>")
        if submission.preference:
            details.append(f"<p><strong>Preferred Contact:</strong> {escape(submission.preference)}</p>")
        body = submission.body or "No message provided."
        details.append(
            '<hr style="margin: 20px 0;" /><p><strong>Message:</strong></p>'
            f"<p>{escape(body).replace(chr(10), '<br>')}</p>"
        )

        html = (
            '<div style="font-family: Arial, sans-serif; font-size: 16px; color: #333;">'
            f'<h2 style="color: #1f2a44;">{title}</h2>{"".join(details)}</div>'
        )
        return self._deliver(
            self.inbox_email,
            f"{title} from {submission.name}",
            body,
            html,
            reply_to=submission.email,
            attachments=[attachment] if attachment else None,
        )


@lru_cache
def get_notifier() -> NotificationService:
    """FastAPI dependency returning the SMTP-backed notifier."""
    return NotificationService(send_email, get_settings().STORE_INBOX_EMAIL)
