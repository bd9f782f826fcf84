"""
Tests for the citizen reporter flow:
- Submitting reports (validation, image upload, notifications)
- Listing a submitter's reports and rewards
"""

import base64

import pytest
import requests

from app.config.firebase import get_bucket
from app.core.exceptions import UploadError, ValidationError
from app.core.settings import settings
from app.models.report import ImageUpload
from app.services.report_service import build_image_path, decode_image
from app.services.report_store import ReportStore


def _image(data=b"\x89PNG\r\n\x1a\nfake-image", filename="photo.png"):
    return {
        "filename": filename,
        "content_type": "image/png",
        "data": base64.b64encode(data).decode(),
    }


# --- Submit ---

def test_submit_report_success(client, db, fake_http):
    """POST /reports → stored as pending with no reward fields."""
    response = client.post("/reports", json={
        "location": "Market Road",
        "description": "Liquor sold from a parked van",
    })

    assert response.status_code == 201
    report = response.json()["report"]
    assert report["status"] == "pending"
    assert report["reward_type"] is None
    assert report["reward_amount"] is None
    assert report["is_blacklisted"] is False
    assert report["image_url"] is None
    assert report["wallet_address"] == settings.DEFAULT_WALLET_ADDRESS
    assert report["created_at"]

    docs = db.collection("reports").get()
    assert [doc.id for doc in docs] == [report["id"]]


def test_submit_report_free_form_category(client, stored):
    response = client.post("/reports", json={"location": "A", "description": "B", "category": "street vendor"})

    assert response.status_code == 201
    assert stored(response.json()["report"]["id"])["category"] == "street vendor"


def test_submit_report_notifies_email_then_alert(client, fake_http):
    """Email call is issued before the voice alert."""
    response = client.post("/reports", json={"location": "Park", "description": "Fight at night"})

    assert response.status_code == 201
    assert fake_http.urls() == ["https://relay.test/send-email", "https://relay.test/alert"]
    assert fake_http.calls[0].json == {
        "title": "New Report Submitted",
        "content": "A new anonymous report has been submitted successfully.",
    }
    outcomes = response.json()["notifications"]
    assert [(o["channel"], o["ok"]) for o in outcomes] == [("email", True), ("alert", True)]


@pytest.mark.parametrize("payload", [
    {"location": "", "description": "Something happened"},
    {"location": "Bus stand", "description": ""},
    {"location": "   ", "description": "Something happened"},
    {"description": "No location at all"},
])
def test_submit_report_missing_fields(client, db, fake_http, payload):
    """Blank location/description → 422 and nothing reaches the store or relay."""
    response = client.post("/reports", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"] == "Please fill all required fields."
    assert db.collection("reports").get() == []
    assert fake_http.calls == []


def test_submit_report_with_image(client, stored):
    """Image is uploaded under reports/{millis}-{name} and its public URL stored."""
    response = client.post("/reports", json={
        "location": "Station Road",
        "description": "Garbage dumped on the footpath",
        "image": _image(),
    })

    assert response.status_code == 201
    report = response.json()["report"]
    assert report["image_url"].startswith("https://storage.googleapis.com/")
    assert report["image_url"].endswith("-photo.png")
    assert stored(report["id"])["image_url"] == report["image_url"]

    paths = list(get_bucket()._objects.keys())
    assert len(paths) == 1
    assert paths[0].startswith("reports/")
    assert get_bucket().blob(paths[0]).download_as_bytes() == b"\x89PNG\r\n\x1a\nfake-image"


def test_submit_report_accepts_data_url(client):
    image = _image()
    image["data"] = "data:image/png;base64," + image["data"]

    response = client.post("/reports", json={"location": "A", "description": "B", "image": image})

    assert response.status_code == 201
    assert response.json()["report"]["image_url"]


def test_submit_report_upload_failure_aborts(client, db, fake_http, monkeypatch):
    """Upload failure → 502, no report row, no notifications."""
    def failing_upload(self, path, data, content_type):
        raise UploadError("Image upload failed: bucket unavailable")

    monkeypatch.setattr(ReportStore, "upload_file", failing_upload)

    response = client.post("/reports", json={
        "location": "Station Road",
        "description": "Garbage dumped",
        "image": _image(),
    })

    assert response.status_code == 502
    assert db.collection("reports").get() == []
    assert fake_http.calls == []


def test_submit_report_invalid_image_data(client, db):
    response = client.post("/reports", json={
        "location": "A",
        "description": "B",
        "image": {"filename": "x.png", "content_type": "image/png", "data": "not base64!!"},
    })

    assert response.status_code == 422
    assert db.collection("reports").get() == []


def test_submit_report_image_too_large(client, db, monkeypatch):
    monkeypatch.setattr(settings, "MAX_IMAGE_BYTES", 4)

    response = client.post("/reports", json={"location": "A", "description": "B", "image": _image()})

    assert response.status_code == 422
    assert db.collection("reports").get() == []


def test_submit_report_notification_failure_is_swallowed(client, db, fake_http):
    """Relay down → report still created; alert still attempted after the email."""
    fake_http.route("/send-email", exc=requests.ConnectionError("relay down"))

    response = client.post("/reports", json={"location": "Park", "description": "Fight at night"})

    assert response.status_code == 201
    outcomes = response.json()["notifications"]
    assert outcomes[0]["channel"] == "email"
    assert outcomes[0]["ok"] is False
    assert "relay down" in outcomes[0]["error"]
    assert outcomes[1]["channel"] == "alert"
    assert outcomes[1]["ok"] is True
    assert fake_http.urls() == ["https://relay.test/send-email", "https://relay.test/alert"]
    assert len(db.collection("reports").get()) == 1


def test_submit_report_relay_error_status(client, fake_http):
    fake_http.route("/alert", status_code=502, json_body={"detail": "Voice alert failed"})

    response = client.post("/reports", json={"location": "Park", "description": "Fight"})

    assert response.status_code == 201
    outcomes = response.json()["notifications"]
    assert outcomes[1] == {"channel": "alert", "attempted": True, "ok": False, "error": "HTTP 502"}


# --- List ---

def test_list_reports_for_wallet_newest_first(client, seed_report):
    seed_report("old", created_at="2024-01-01T00:00:00", wallet_address="0xA")
    seed_report("new", created_at="2024-01-05T00:00:00", wallet_address="0xA")
    seed_report("other", created_at="2024-01-03T00:00:00", wallet_address="0xB")

    response = client.get("/reports", params={"wallet_address": "0xA"})

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == ["new", "old"]


def test_list_reports_defaults_to_app_wallet(client, seed_report):
    seed_report("mine", wallet_address=settings.DEFAULT_WALLET_ADDRESS)
    seed_report("theirs", wallet_address="0xB")

    response = client.get("/reports")

    assert [r["id"] for r in response.json()] == ["mine"]


def test_submitted_report_shows_in_list(client):
    created = client.post("/reports", json={"location": "A", "description": "B"}).json()["report"]

    listed = client.get("/reports").json()

    assert listed[0]["id"] == created["id"]


def test_reward_summary(client, seed_report):
    seed_report("c1", wallet_address="0xA", status="confirmed", reward_type="positive", reward_amount=10)
    seed_report("c2", wallet_address="0xA", status="confirmed", reward_type="positive", reward_amount=15)
    seed_report("r1", wallet_address="0xA", status="rejected", reward_type="negative", reward_amount=0)
    seed_report("p1", wallet_address="0xA")
    seed_report("c3", wallet_address="0xB", status="confirmed", reward_type="positive", reward_amount=99)

    response = client.get("/reports/rewards", params={"wallet_address": "0xA"})

    assert response.status_code == 200
    assert response.json() == {"wallet_address": "0xA", "confirmed_count": 2, "total_reward": 25}


# --- Helpers ---

def test_build_image_path_sanitizes_name():
    assert build_image_path("../my photo (1).jpg", now_ms=1700000000000) == "reports/1700000000000-my_photo__1_.jpg"


def test_decode_image_rejects_empty():
    with pytest.raises(ValidationError):
        decode_image(ImageUpload(filename="x.png", data=""), max_bytes=100)
