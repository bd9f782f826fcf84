"""
Tests for the report store against the in-memory Firestore/Storage.
"""

from datetime import datetime, timezone

import pytest

from app.config.mock_firestore import MockBucket, MockFirestore
from app.core.exceptions import ReportNotFoundError
from app.services.report_store import ReportStore


@pytest.fixture
def store():
    return ReportStore(db=MockFirestore(), bucket=MockBucket("civic-guard.appspot.com"))


def _fields(**overrides):
    fields = {
        "wallet_address": "0xabc",
        "location": "Main Road",
        "description": "Something suspicious",
        "status": "pending",
        "reward_type": None,
        "reward_amount": None,
        "is_blacklisted": False,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return fields


def test_create_and_get(store):
    created = store.create_report(_fields())

    fetched = store.get_report(created.id)

    assert fetched.id == created.id
    assert fetched.status == "pending"


def test_get_missing(store):
    with pytest.raises(ReportNotFoundError):
        store.get_report("nope")


def test_update_missing(store):
    with pytest.raises(ReportNotFoundError):
        store.update_report("nope", {"is_blacklisted": True})


def test_list_filters_combine(store):
    store.create_report(_fields(wallet_address="0xA", status="confirmed", reward_type="positive", reward_amount=1))
    store.create_report(_fields(wallet_address="0xA"))
    store.create_report(_fields(wallet_address="0xB", status="confirmed", reward_type="positive", reward_amount=1))

    reports = store.list_reports(status="confirmed", wallet_address="0xA")

    assert [(r.wallet_address, r.status) for r in reports] == [("0xA", "confirmed")]


def test_upload_returns_public_url(store):
    url = store.upload_file("reports/1-a b.png", b"data", "image/png")

    assert url == "https://storage.googleapis.com/civic-guard.appspot.com/reports/1-a%20b.png"
    assert store.bucket.blob("reports/1-a b.png").exists()


def test_mock_store_persists_to_file(tmp_path):
    path = str(tmp_path / "mock_db.json")
    ReportStore(db=MockFirestore(path)).db.collection("reports").document("r1").set(_fields())

    reloaded = ReportStore(db=MockFirestore(path)).get_report("r1")

    assert reloaded.location == "Main Road"
    assert reloaded.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
