import json

import stripe

from classy_backend.schemas.checkout import CheckoutLineItem
from classy_backend.services.checkout_service import (
    METADATA_MAX_KEYS,
    METADATA_VALUE_LIMIT,
    CheckoutService,
    pack_items,
    to_minor_units,
    unpack_items,
)
from conftest import API


def checkout_body(**overrides):
    body = {
        "items": [
            {"id": "ring-a", "name": "Solitaire Ring", "price": 1200.0, "quantity": 1,
             "image": "https://cdn.example.com/ring.jpg"},
            {"id": "bracelet-b", "name": "Tennis Bracelet", "price": 19.99, "quantity": 2,
             "image": "/images/bracelet.jpg"},
        ],
        "name": "Ava Stone",
        "email": "ava@example.com",
        "address": {
            "street1": "1 Main St",
            "street2": "Apt 4",
            "city": "Austin",
            "state": "TX",
            "zip": "78701",
            "country": "US",
        },
        "notes": "Gift wrap please",
    }
    body.update(overrides)
    return body


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(19.99) == 1999
    assert to_minor_units(19.995) == 2000
    assert to_minor_units(0.1) == 10


def test_creates_session_with_line_items_and_metadata(client, gateway):
    res = client.post(
        f"{API}/checkout",
        json=checkout_body(),
        headers={"Origin": "https://shop.classydiamonds.com"},
    )

    assert res.status_code == 200
    data = res.json()
    assert data["url"].startswith("https://checkout.stripe.com/")
    assert data["session_id"].startswith("cs_test_")

    params = gateway.created[0]
    assert params["mode"] == "payment"
    assert params["payment_method_types"] == ["card"]
    assert params["customer_email"] == "ava@example.com"
    assert params["success_url"] == (
        "https://shop.classydiamonds.com/success?session_id={CHECKOUT_SESSION_ID}"
    )
    assert params["cancel_url"] == "https://shop.classydiamonds.com/cart"

    ring, bracelet = params["line_items"]
    assert ring["price_data"]["unit_amount"] == 120000
    assert ring["price_data"]["product_data"]["images"] == ["https://cdn.example.com/ring.jpg"]
    assert bracelet["price_data"]["unit_amount"] == 1999
    assert bracelet["quantity"] == 2
    assert "images" not in bracelet["price_data"]["product_data"]

    metadata = params["metadata"]
    assert metadata["customer_name"] == "Ava Stone"
    assert metadata["customer_address"] == "1 Main St, Apt 4, Austin, TX 78701, US"
    assert metadata["address_city"] == "Austin"
    assert metadata["notes"] == "Gift wrap please"
    assert [i["name"] for i in unpack_items(metadata)] == ["Solitaire Ring", "Tennis Bracelet"]


def test_redirects_fall_back_to_site_url(client, gateway):
    res = client.post(f"{API}/checkout", json=checkout_body())

    assert res.status_code == 200
    assert gateway.created[0]["cancel_url"] == "http://localhost:3000/cart"


def test_payment_method_hint(client, gateway):
    client.post(f"{API}/checkout", json=checkout_body(payment_method="Klarna"))
    client.post(f"{API}/checkout", json=checkout_body(payment_method="bitcoin"))

    assert gateway.created[0]["payment_method_types"] == ["klarna"]
    assert gateway.created[1]["payment_method_types"] == ["card"]


def test_invalid_lines_are_dropped(client, gateway):
    items = [
        {"name": "Solitaire Ring", "price": 1200.0, "quantity": 1},
        {"name": "", "price": 10.0, "quantity": 1},
        {"name": "Free Sample", "price": 0, "quantity": 1},
        {"name": "Charm", "price": 15.0, "quantity": 0},
    ]
    res = client.post(f"{API}/checkout", json=checkout_body(items=items))

    assert res.status_code == 200
    assert len(gateway.created[0]["line_items"]) == 1


def test_empty_cart_is_rejected(client, gateway):
    res = client.post(
        f"{API}/checkout",
        json=checkout_body(items=[{"name": "Ghost", "price": None, "quantity": 1}]),
    )

    assert res.status_code == 400
    assert res.json()["detail"] == "Cart is empty"
    assert gateway.created == []

    res = client.post(f"{API}/checkout", json=checkout_body(items=[]))
    assert res.status_code == 400


def test_missing_address_fields_are_422(client):
    body = checkout_body()
    body["address"]["city"] = "  "

    assert client.post(f"{API}/checkout", json=body).status_code == 422


def test_processor_error_is_500_with_message(client, gateway):
    gateway.error = stripe.StripeError("Processor unavailable")

    res = client.post(f"{API}/checkout", json=checkout_body())

    assert res.status_code == 500
    assert res.json()["detail"] == "Processor unavailable"


def test_large_carts_are_split_across_metadata_keys():
    snapshot = [
        {"id": f"sku-{i}", "name": f"Diamond Pendant No. {i}", "quantity": 1, "price": 499.0}
        for i in range(30)
    ]

    packed = pack_items(snapshot)

    assert "items_1" in packed
    assert all(len(value) <= METADATA_VALUE_LIMIT for value in packed.values())
    assert unpack_items(packed) == snapshot
    assert json.loads(packed["items"] + "".join(
        packed[f"items_{i}"] for i in range(1, len(packed))
    )) == snapshot


def cart_filling_chunks(target):
    """Smallest cart whose item snapshot packs into `target` metadata values."""
    items = []
    while True:
        i = len(items)
        items.append({"id": f"sku-{i}", "name": f"Pave Pendant {i:03d} " + "x" * 300,
                      "price": 250.0, "quantity": 1})
        snapshot = [CheckoutService._snapshot(CheckoutLineItem(**item)) for item in items]
        if len(pack_items(snapshot, max_chunks=1000)) == target:
            return items


# name, email, one-line address, six address fields, notes, payment method
FULL_FORM_KEYS = 11


def test_metadata_stays_within_stripe_key_limit(client, gateway):
    items = cart_filling_chunks(METADATA_MAX_KEYS - FULL_FORM_KEYS)

    res = client.post(f"{API}/checkout", json=checkout_body(items=items, payment_method="card"))

    assert res.status_code == 200
    metadata = gateway.created[0]["metadata"]
    assert len(metadata) == METADATA_MAX_KEYS
    assert len(unpack_items(metadata)) == len(items)


def test_cart_needing_more_metadata_keys_than_allowed_is_rejected(client, gateway):
    items = cart_filling_chunks(METADATA_MAX_KEYS - FULL_FORM_KEYS + 1)

    res = client.post(f"{API}/checkout", json=checkout_body(items=items, payment_method="card"))

    assert res.status_code == 400
    assert res.json()["detail"] == "Cart has too many items for a single checkout"
    assert gateway.created == []
