from classy_backend.core.storage_utils import MAX_IMAGE_BYTES
from conftest import API, bearer

JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 32


def test_contact_message_is_stored_and_emailed(client, sender):
    res = client.post(
        f"{API}/contact",
        data={
            "name": "Ava Stone",
            "email": "ava@example.com",
            "phone": "512-555-0100",
            "message": "Do you resize rings?",
        },
    )

    assert res.status_code == 200
    assert res.json() == {"success": True, "notified": True}

    [email] = sender.sent
    assert email["to_email"] == "inbox@classydiamonds.com"
    assert email["reply_to"] == "ava@example.com"
    assert email["subject"] == "New Contact Message from Ava Stone"
    assert email["attachments"] is None


def test_custom_request_forwards_attachment(client, sender):
    res = client.post(
        f"{API}/contact",
        data={
            "name": "Liam Gold",
            "email": "liam@example.com",
            "type": "Pendant",
            "preference": "email",
            "custom_message": "Heart pendant with birthstones",
            "form_category": "custom",
        },
        files={"file": ("sketch.jpg", JPEG, "image/jpeg")},
    )

    assert res.status_code == 200
    [email] = sender.sent
    assert email["subject"].startswith("New Custom Jewelry Inquiry")
    assert "Pendant" in email["html_body"]
    assert email["attachments"] == [("sketch.jpg", "image/jpeg", JPEG)]


def test_missing_body_is_rejected(client, sender):
    res = client.post(
        f"{API}/contact",
        data={"name": "Ava", "email": "ava@example.com", "form_category": "custom", "message": "wrong field"},
    )

    assert res.status_code == 400
    assert sender.sent == []


def test_missing_name_is_rejected(client):
    res = client.post(f"{API}/contact", data={"email": "ava@example.com", "message": "hi"})

    assert res.status_code == 400


def test_oversized_attachment_is_rejected(client):
    res = client.post(
        f"{API}/contact",
        data={"name": "Ava", "email": "ava@example.com", "message": "see photo"},
        files={"file": ("big.jpg", b"\x00" * (MAX_IMAGE_BYTES + 1), "image/jpeg")},
    )

    assert res.status_code == 413


def test_email_failure_still_stores_message(client, sender):
    sender.fail = True
    data = {"name": "Ava", "email": "ava@example.com", "message": "hello"}

    res = client.post(f"{API}/contact", data=data)

    assert res.json() == {"success": True, "notified": False}
    messages = client.get(f"{API}/account/messages", headers=bearer("ava@example.com")).json()
    assert [m["message"] for m in messages] == ["hello"]


def test_account_messages_are_per_user(client):
    client.post(f"{API}/contact", data={"name": "Ava", "email": "ava@example.com", "message": "one"})
    client.post(f"{API}/contact", data={"name": "Liam", "email": "liam@example.com", "message": "two"})

    mine = client.get(f"{API}/account/messages", headers=bearer("liam@example.com")).json()

    assert [m["message"] for m in mine] == ["two"]
    assert client.get(f"{API}/account/messages").status_code == 401


def test_custom_photo_gallery(client, image_host):
    res = client.post(
        f"{API}/admin/custom-photos",
        files={"file": ("piece.jpg", JPEG, "image/jpeg")},
    )

    assert res.status_code == 201
    assert image_host.uploaded[0][0] == "custom"

    photos = client.get(f"{API}/custom-photos").json()
    assert [p["image_url"] for p in photos] == [res.json()["image_url"]]
