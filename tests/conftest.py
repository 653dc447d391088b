import hashlib
import hmac
import json
import os
import time
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

# Settings are read once at import time; configure before importing the app.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://project.supabase.co"
os.environ["SUPABASE_KEY"] = "anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["STORE_INBOX_EMAIL"] = "inbox@classydiamonds.com"
os.environ["ADMIN_ENFORCE_AUTH"] = "false"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from classy_backend.core.config import get_settings
from classy_backend.core.storage_utils import get_image_host, validate_image
from classy_backend.core.stripe_client import StripeGateway, get_payment_gateway
from classy_backend.database import engine, get_session
from classy_backend.main import app
from classy_backend.models.order import Order
from classy_backend.models.user import User
from classy_backend.services.notification_service import NotificationService, get_notifier

API = get_settings().API_V1_STR
WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


class RecordingSender:
    """
    Stands in for the SMTP sender; `fail=True` makes every send raise and
    `delay` makes every send block like a slow mail server.
    """

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False
        self.delay = 0.0

    def __call__(self, **message):
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append(message)


class FakeGateway(StripeGateway):
    """Records checkout requests; signature verification is the real one."""

    def __init__(self):
        super().__init__("sk_test_dummy", WEBHOOK_SECRET)
        self.created: list[dict] = []
        self.error: Exception | None = None

    def create_checkout_session(self, **params):
        if self.error is not None:
            raise self.error
        self.created.append(params)
        session_id = f"cs_test_{uuid.uuid4().hex}"
        return SimpleNamespace(
            id=session_id,
            url=f"https://checkout.stripe.com/c/pay/{session_id}",
        )


class FakeImageHost:
    def __init__(self):
        self.uploaded: list[tuple[str, str, int]] = []
        self.deleted: list[str] = []

    def upload(self, folder, content_type, file_bytes):
        ext = validate_image(content_type, file_bytes)
        self.uploaded.append((folder, content_type, len(file_bytes)))
        return f"https://cdn.example.com/assets/{folder}/{len(self.uploaded)}.{ext}"

    def delete_public_url(self, url):
        self.deleted.append(url)


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header for `payload`."""
    ts = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{ts}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={ts},v1={signature}"


def completed_event(session_id: str, metadata: dict, amount_total: int = 10000, **extra) -> dict:
    checkout = {
        "id": session_id,
        "object": "checkout.session",
        "amount_total": amount_total,
        "currency": "usd",
        "payment_status": "paid",
        "metadata": metadata,
        "customer_details": {"name": None, "email": None},
    }
    checkout.update(extra)
    return {
        "id": f"evt_{uuid.uuid4().hex}",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": checkout},
    }


def bearer(email: str, user_id: uuid.UUID | None = None) -> dict[str, str]:
    claims = {
        "sub": str(user_id or uuid.uuid5(uuid.NAMESPACE_DNS, email)),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    token = jwt.encode(claims, get_settings().SUPABASE_JWT_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def session():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def notifier(sender):
    return NotificationService(sender, get_settings().STORE_INBOX_EMAIL)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def client(session, notifier, gateway, image_host):
    def _get_session():
        yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_image_host] = lambda: image_host
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def post_event(client):
    """POST a signed webhook event and return the response."""

    def _post(event: dict, signature: str | None = None):
        payload = json.dumps(event)
        headers = {
            "Content-Type": "application/json",
            "Stripe-Signature": signature or sign_payload(payload),
        }
        return client.post(f"{API}/webhook", content=payload, headers=headers)

    return _post


@pytest.fixture
def make_order(session):
    """Insert an Order directly, as the webhook would."""

    def _make(session_id: str | None = None, **fields) -> Order:
        session_id = session_id or f"cs_test_{uuid.uuid4().hex}"
        values = {
            "stripe_session_id": session_id,
            "order_number": session_id[-8:].upper(),
            "customer_name": "Ava Stone",
            "customer_email": "ava@example.com",
            "customer_address": "1 Main St, Austin, TX 78701, US",
            "items": [{"name": "Solitaire Ring", "quantity": 1, "price": 1200.0}],
            "amount": 1200.0,
            "payment_status": "paid",
        }
        values.update(fields)
        order = Order(**values)
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make


@pytest.fixture
def admin_user(session):
    user = User(
        id=uuid.uuid4(),
        email="owner@example.com",
        name="owner",
        role="admin",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
