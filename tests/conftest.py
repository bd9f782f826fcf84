"""
Shared fixtures: mock Firestore/Storage, a fake HTTP layer for outbound
requests, and a signed-in reviewer via dependency override.
"""

import os

# Must be set before app.core.settings is imported
os.environ["USE_MOCK_DB"] = "true"
os.environ["MOCK_DB_PATH"] = ""
os.environ["RELAY_API_KEY"] = ""
os.environ["RELAY_RATE_LIMIT_PER_MINUTE"] = "0"
os.environ["ANCHOR_BASE_URL"] = "https://anchor.test"
os.environ["RELAY_BASE_URL"] = "https://relay.test"

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
import requests
from fastapi.testclient import TestClient

from app.config.firebase import get_bucket, get_db
from app.dependencies import require_session
from app.main import app
from app.models.user import User


class FakeResponse:
    def __init__(self, status_code=200, json_body=None, text=""):
        self.status_code = status_code
        self._json = json_body if json_body is not None else {}
        self.text = text or str(self._json)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._json


class FakeHTTP:
    """
    Records every requests.post call. Responses are chosen by URL fragment;
    unmatched URLs answer 200 {}.
    """

    def __init__(self):
        self.calls = []
        self._routes = {}

    def route(self, fragment, status_code=200, json_body=None, exc=None):
        self._routes[fragment] = (status_code, json_body, exc)

    def post(self, url, **kwargs):
        self.calls.append(SimpleNamespace(url=url, **kwargs))
        for fragment, (status_code, json_body, exc) in self._routes.items():
            if fragment in url:
                if exc is not None:
                    raise exc
                return FakeResponse(status_code, json_body)
        return FakeResponse(200, {})

    def urls(self):
        return [call.url for call in self.calls]

    def calls_to(self, fragment):
        return [call for call in self.calls if fragment in call.url]


@pytest.fixture(autouse=True)
def db():
    """Fresh mock store for every test."""
    database = get_db()
    database.clear()
    get_bucket().clear()
    yield database
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
def fake_http(monkeypatch):
    """No test ever reaches the network."""
    fake = FakeHTTP()
    monkeypatch.setattr(requests, "post", fake.post)
    return fake


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def reviewer():
    """Sign in a reviewer by overriding the route guard."""
    user = User(id="reviewer-1", email="reviewer@example.org", role="authority", name="Asha")
    app.dependency_overrides[require_session] = lambda: SimpleNamespace(user=user)
    yield user
    app.dependency_overrides.pop(require_session, None)


@pytest.fixture
def seed_report(db):
    """Insert a report document directly into the mock store."""

    def _seed(report_id, created_at="2024-01-01T00:00:00", **fields):
        doc = {
            "wallet_address": "0xabc",
            "location": "Main Road",
            "description": "Something suspicious",
            "image_url": None,
            "status": "pending",
            "reward_type": None,
            "reward_amount": None,
            "is_blacklisted": False,
            "category": None,
            "created_at": datetime.fromisoformat(created_at).replace(tzinfo=timezone.utc),
        }
        doc.update(fields)
        db.collection("reports").document(str(report_id)).set(doc)
        return doc

    return _seed


@pytest.fixture
def stored(db):
    """Read a report document straight from the mock store."""

    def _stored(report_id):
        return db.collection("reports").document(str(report_id)).get().to_dict()

    return _stored
