# classy_backend/core/email_client.py
"""
Outgoing mail for receipts, shipping updates and contact-form forwarding.

SMTP settings come from the environment and are read once at import:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=orders@classydiamonds.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=orders@classydiamonds.com
    SMTP_FROM_NAME=Classy Diamonds
    SMTP_USE_SSL=true        # implicit TLS (port 465)
    SMTP_USE_TLS=false       # STARTTLS on a plain connection (port 587)

Callers should treat send_email as fallible; NotificationService wraps it
so a mail outage never fails an order operation.
"""

import os
import smtplib
from email.message import EmailMessage

Attachment = tuple[str, str, bytes]  # (filename, content_type, data)

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL") or SMTP_USERNAME or ""
SMTP_FROM_NAME = os.getenv("SMTP_FROM_NAME", "Classy Diamonds")
SMTP_USE_SSL = _env_flag("SMTP_USE_SSL", False)
SMTP_USE_TLS = _env_flag("SMTP_USE_TLS", True)

SMTP_TIMEOUT_SECONDS = 30


def build_message(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
    reply_to: str | None = None,
    attachments: list[Attachment] | None = None,
) -> EmailMessage:
    """
    Assemble a multipart message: plain text, optional HTML alternative,
    then any attachments.
    """
    msg = EmailMessage()
    msg["From"] = f"{SMTP_FROM_NAME} <{SMTP_FROM_EMAIL}>" if SMTP_FROM_EMAIL else (SMTP_USERNAME or "")
    msg["To"] = to_email
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to

    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    for filename, content_type, data in attachments or []:
        maintype, _, subtype = content_type.partition("/")
        msg.add_attachment(
            data,
            maintype=maintype or "application",
            subtype=subtype or "octet-stream",
            filename=filename,
        )
    return msg


def _connect() -> smtplib.SMTP:
    if SMTP_USE_SSL:
        return smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)

    server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)
    if SMTP_USE_TLS:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
    reply_to: str | None = None,
    attachments: list[Attachment] | None = None,
) -> None:
    """
    Deliver one message to one recipient.

    Raises:
        RuntimeError: SMTP_HOST / SMTP_USERNAME / SMTP_PASSWORD not set.
        smtplib.SMTPException, OSError: connection, login or send failure.
    """
    if not (SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD):
        raise RuntimeError("SMTP is not configured: set SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD.")

    msg = build_message(to_email, subject, text_body, html_body, reply_to, attachments)

    with _connect() as server:
        server.login(SMTP_USERNAME, SMTP_PASSWORD)
        server.send_message(msg)
