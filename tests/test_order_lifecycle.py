from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from classy_backend.core.config import get_settings
from classy_backend.models.admin_log import AdminLogEntry
from classy_backend.models.order import Order
from classy_backend.repositories.admin_log_repo import AdminLogRepository
from classy_backend.services.notification_service import tracking_url
from conftest import API, bearer, completed_event

log_repo = AdminLogRepository()


def actions_for(session, order_id):
    return [entry.action for entry in log_repo.list_for_order(session, order_id)]


def test_checkout_to_shipped_scenario(client, gateway, session, sender, post_event):
    cart = [
        {"id": "ring-a", "name": "Ring A", "price": 1200.0, "quantity": 1},
        {"id": "bracelet-b", "name": "Bracelet B", "price": 850.5, "quantity": 2},
    ]
    res = client.post(
        f"{API}/checkout",
        json={
            "items": cart,
            "name": "Ava Stone",
            "email": "ava@example.com",
            "address": {"street1": "1 Main St", "city": "Austin", "state": "TX", "zip": "78701"},
        },
    )
    session_id = res.json()["session_id"]
    metadata = gateway.created[0]["metadata"]

    post_event(completed_event(session_id, metadata, amount_total=290100))

    order = session.exec(select(Order)).one()
    assert [(i["id"], i["quantity"], i["price"]) for i in order.items] == [
        ("ring-a", 1, 1200.0),
        ("bracelet-b", 2, 850.5),
    ]
    assert order.shipped is False

    res = client.post(f"{API}/admin/orders/{session_id}/shipped")

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["order"]["shipped"] is True
    assert body["order"]["shipped_at"] is not None
    assert actions_for(session, session_id) == ["shipped"]
    assert [m["subject"] for m in sender.sent] == [
        "Your Classy Diamonds Receipt",
        "Your Order Has Shipped!",
    ]


def test_archive_then_restore(client, session, make_order):
    order = make_order()
    sid = order.stripe_session_id

    archived = client.post(f"{API}/admin/orders/{sid}/archive").json()["order"]
    assert archived["archived"] is True
    assert archived["archived_at"] is not None

    restored = client.post(f"{API}/admin/orders/{sid}/restore").json()["order"]
    assert restored["archived"] is False
    assert restored["archived_at"] is None

    assert actions_for(session, sid) == ["archive", "restore"]


@pytest.mark.parametrize("action", ["shipped", "delivered", "archive", "restore"])
def test_unknown_order_is_404_and_not_logged(client, session, sender, action):
    res = client.post(f"{API}/admin/orders/cs_test_missing/{action}")

    assert res.status_code == 404
    assert res.json()["detail"] == "Order not found"
    assert session.exec(select(AdminLogEntry)).all() == []
    assert sender.sent == []


def test_tracking_unknown_carrier_has_no_link(client, session, sender, make_order):
    sid = make_order().stripe_session_id

    res = client.post(
        f"{API}/admin/orders/{sid}/tracking",
        json={"tracking_number": "JD014600003828", "carrier": "DHL"},
    )

    assert res.status_code == 200
    order = res.json()["order"]
    assert order["tracking_number"] == "JD014600003828"
    assert order["carrier"] == "DHL"
    assert order["tracking_updated_at"] is not None
    assert actions_for(session, sid) == ["tracking"]

    [email] = sender.sent
    assert "JD014600003828" in email["html_body"]
    assert "Track Your Package" not in email["html_body"]
    assert "http" not in email["text_body"]


def test_tracking_known_carrier_links_case_insensitively(client, sender, make_order):
    sid = make_order().stripe_session_id

    client.post(
        f"{API}/admin/orders/{sid}/tracking",
        json={"tracking_number": "1Z999AA10123456784", "carrier": "ups"},
    )

    [email] = sender.sent
    assert "https://www.ups.com/track?loc=en_US&tracknum=1Z999AA10123456784" in email["text_body"]


def test_tracking_url_table():
    assert tracking_url("FedEx", "123").startswith("https://www.fedex.com/")
    assert tracking_url("USPS", "9400").endswith("9400")
    assert tracking_url("DHL", "1") is None
    assert tracking_url(None, "1") is None


def test_empty_tracking_number_is_rejected(client, make_order):
    sid = make_order().stripe_session_id

    res = client.post(f"{API}/admin/orders/{sid}/tracking", json={"tracking_number": " "})

    assert res.status_code == 422


def test_delivered_without_shipping_is_allowed(client, make_order):
    sid = make_order().stripe_session_id

    order = client.post(f"{API}/admin/orders/{sid}/delivered").json()["order"]

    assert order["delivered"] is True
    assert order["shipped"] is False


def test_reshipping_restamps_and_resends(client, session, sender, make_order):
    sid = make_order().stripe_session_id

    first = client.post(f"{API}/admin/orders/{sid}/shipped").json()["order"]["shipped_at"]
    second = client.post(f"{API}/admin/orders/{sid}/shipped").json()["order"]["shipped_at"]

    assert second >= first
    assert actions_for(session, sid) == ["shipped", "shipped"]
    assert len(sender.sent) == 2


def test_email_failure_does_not_undo_transition(client, sender, make_order):
    sid = make_order().stripe_session_id
    sender.fail = True

    res = client.post(f"{API}/admin/orders/{sid}/shipped")

    assert res.status_code == 200
    assert res.json()["order"]["shipped"] is True


def test_admin_views_filter_one_table(client, make_order):
    now = datetime.now(timezone.utc)
    make_order("cs_new")
    make_order("cs_in_transit", shipped=True, shipped_at=now)
    make_order("cs_done", shipped=True, shipped_at=now, delivered=True, delivered_at=now)
    make_order("cs_old", archived=True, archived_at=now)

    def ids(path):
        return {o["stripe_session_id"] for o in client.get(f"{API}/admin/{path}").json()["orders"]}

    assert ids("orders") == {"cs_new", "cs_old"}
    assert ids("orders/shipped") == {"cs_in_transit"}
    assert ids("orders/delivered") == {"cs_done"}
    assert ids("orders/archived") == {"cs_old"}


def test_admin_views_tolerate_partial_item_snapshots(client, make_order):
    make_order("cs_test_legacy01", items=[{"name": "Heirloom Brooch"}, {"price": 90.0}])

    res = client.get(f"{API}/admin/orders")

    assert res.status_code == 200
    (order,) = res.json()["orders"]
    assert order["items"] == [
        {"name": "Heirloom Brooch", "quantity": 0, "price": 0.0, "image": None},
        {"name": "", "quantity": 0, "price": 90.0, "image": None},
    ]
    assert client.get(f"{API}/admin/orders/cs_test_legacy01").status_code == 200


def test_get_single_order(client, make_order):
    make_order("cs_test_lookup")

    assert client.get(f"{API}/admin/orders/cs_test_lookup").json()["order_number"] == "T_LOOKUP"
    assert client.get(f"{API}/admin/orders/cs_nope").status_code == 404


def test_customer_order_history_is_paginated(client, make_order):
    start = datetime.now(timezone.utc) - timedelta(days=10)
    for i in range(7):
        make_order(f"cs_hist_{i}", created_at=start + timedelta(days=i), shipped=i < 2)
    make_order("cs_someone_else", customer_email="liam@example.com")

    headers = bearer("ava@example.com")
    page1 = client.get(f"{API}/orders/me", headers=headers).json()
    page2 = client.get(f"{API}/orders/me?page=2", headers=headers).json()

    assert (page1["total"], page1["total_pages"], page1["page"]) == (7, 2, 1)
    assert [o["stripe_session_id"] for o in page1["orders"]][:2] == ["cs_hist_6", "cs_hist_5"]
    assert len(page1["orders"]) == 5
    assert len(page2["orders"]) == 2

    shipped = client.get(f"{API}/orders/me?shipped=true", headers=headers).json()
    assert shipped["total"] == 2


def test_customer_order_history_requires_login(client):
    assert client.get(f"{API}/orders/me").status_code == 401


def test_admin_logs_newest_first_with_order_number(client, make_order):
    a = make_order("cs_test_aaaaaaaa").stripe_session_id
    b = make_order("cs_test_bbbbbbbb").stripe_session_id
    client.post(f"{API}/admin/orders/{a}/archive")
    client.post(f"{API}/admin/orders/{b}/shipped")
    client.post(f"{API}/admin/orders/{a}/restore")

    logs = client.get(f"{API}/admin/logs").json()["logs"]
    assert [(e["order_id"], e["action"]) for e in logs] == [
        (a, "restore"),
        (b, "shipped"),
        (a, "archive"),
    ]
    assert logs[0]["order_number"] == "AAAAAAAA"
    assert logs[0]["performed_by"] == "admin"

    only_a = client.get(f"{API}/admin/logs", params={"order_id": a}).json()["logs"]
    assert [e["action"] for e in only_a] == ["restore", "archive"]


def test_bearer_identity_is_recorded_as_actor(client, session, make_order):
    sid = make_order().stripe_session_id

    client.post(f"{API}/admin/orders/{sid}/archive", headers=bearer("clerk@example.com"))

    [entry] = log_repo.list_for_order(session, sid)
    assert entry.performed_by == "clerk@example.com"


@pytest.fixture
def enforce_admin(monkeypatch):
    monkeypatch.setattr(get_settings(), "ADMIN_ENFORCE_AUTH", True)


def test_enforced_admin_routes_require_admin_role(client, enforce_admin, admin_user, make_order):
    sid = make_order().stripe_session_id
    path = f"{API}/admin/orders/{sid}/shipped"

    assert client.post(path).status_code == 401
    assert client.post(path, headers=bearer("ava@example.com")).status_code == 403
    assert client.get(f"{API}/admin/orders", headers=bearer("ava@example.com")).status_code == 403

    res = client.post(path, headers=bearer(admin_user.email, admin_user.id))
    assert res.status_code == 200

    logs = client.get(f"{API}/admin/logs", headers=bearer(admin_user.email, admin_user.id)).json()["logs"]
    assert logs[0]["performed_by"] == "owner@example.com"


def test_webhook_stays_open_when_admin_auth_is_enforced(post_event, enforce_admin, session):
    event = completed_event("cs_test_public", {"customer_email": "ava@example.com"})

    assert post_event(event).status_code == 200
    assert session.exec(select(Order)).one().stripe_session_id == "cs_test_public"
