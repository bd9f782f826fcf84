"""
In-memory stand-in for Firestore and Cloud Storage.

Used when USE_MOCK_DB=true so the API runs locally (and under pytest)
without Firebase credentials. Implements only the subset of the client
API this project calls. When a path is given, documents are persisted to
that JSON file after every write.
"""

import copy
import json
import os
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from google.api_core.exceptions import NotFound

_OPERATORS = {
    "==": lambda a, b: a == b,
}


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {"__datetime__": value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value.keys()) == {"__datetime__"}:
            return datetime.fromisoformat(value["__datetime__"])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


class MockDocumentSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        return copy.deepcopy(self._data) if self._data is not None else None


class MockDocumentReference:
    def __init__(self, store: "MockFirestore", collection: str, doc_id: str):
        self._store = store
        self._collection = collection
        self.id = doc_id

    def set(self, data: Dict) -> None:
        with self._store._lock:
            self._store._data.setdefault(self._collection, {})[self.id] = copy.deepcopy(data)
            self._store._persist()

    def update(self, data: Dict) -> None:
        with self._store._lock:
            docs = self._store._data.setdefault(self._collection, {})
            if self.id not in docs:
                raise NotFound(f"No document to update: {self._collection}/{self.id}")
            docs[self.id].update(copy.deepcopy(data))
            self._store._persist()

    def get(self) -> MockDocumentSnapshot:
        with self._store._lock:
            data = self._store._data.get(self._collection, {}).get(self.id)
            return MockDocumentSnapshot(self.id, copy.deepcopy(data))


class MockQuery:
    def __init__(self, store: "MockFirestore", collection: str):
        self._store = store
        self._collection = collection
        self._filters: List[tuple] = []
        self._limit: Optional[int] = None

    def _copy(self) -> "MockQuery":
        clone = MockQuery(self._store, self._collection)
        clone._filters = list(self._filters)
        clone._limit = self._limit
        return clone

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator in mock Firestore: {op_string}")
        clone = self._copy()
        clone._filters.append((field_path, op_string, value))
        return clone

    def limit(self, count: int) -> "MockQuery":
        clone = self._copy()
        clone._limit = count
        return clone

    def stream(self):
        with self._store._lock:
            items = list(self._store._data.get(self._collection, {}).items())

        results = []
        for doc_id, data in items:
            if all(_OPERATORS[op](data.get(field), value) for field, op, value in self._filters):
                results.append((doc_id, data))

        if self._limit is not None:
            results = results[: self._limit]

        for doc_id, data in results:
            yield MockDocumentSnapshot(doc_id, copy.deepcopy(data))

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    def __init__(self, store: "MockFirestore", name: str):
        super().__init__(store, name)
        self.id = name

    def document(self, doc_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._store, self._collection, doc_id or uuid.uuid4().hex[:20])


class MockFirestore:
    """Dictionary-backed Firestore client: {collection: {doc_id: data}}."""

    def __init__(self, path: Optional[str] = None):
        self._path = path or None
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Dict]] = {}
        if self._path and os.path.exists(self._path):
            with open(self._path, "r", encoding="utf-8") as f:
                self._data = _decode(json.load(f))

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def clear(self) -> None:
        with self._lock:
            self._data = {}
            self._persist()

    def _persist(self) -> None:
        if not self._path:
            return
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(_encode(self._data), f, indent=2)


class MockBlob:
    def __init__(self, bucket: "MockBucket", name: str):
        self._bucket = bucket
        self.name = name
        self.content_type: Optional[str] = None

    def upload_from_string(self, data: bytes, content_type: Optional[str] = None) -> None:
        self.content_type = content_type
        self._bucket._objects[self.name] = (bytes(data), content_type)

    def make_public(self) -> None:
        if self.name not in self._bucket._objects:
            raise NotFound(f"No such object: {self._bucket.name}/{self.name}")

    def exists(self) -> bool:
        return self.name in self._bucket._objects

    def download_as_bytes(self) -> bytes:
        if self.name not in self._bucket._objects:
            raise NotFound(f"No such object: {self._bucket.name}/{self.name}")
        return self._bucket._objects[self.name][0]

    @property
    def public_url(self) -> str:
        return f"https://storage.googleapis.com/{self._bucket.name}/{quote(self.name)}"


class MockBucket:
    def __init__(self, name: str):
        self.name = name
        self._objects: Dict[str, tuple] = {}

    def blob(self, name: str) -> MockBlob:
        return MockBlob(self, name)

    def clear(self) -> None:
        self._objects = {}


_mock_db: Optional[MockFirestore] = None
_mock_bucket: Optional[MockBucket] = None


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    global _mock_db
    if _mock_db is None:
        _mock_db = MockFirestore(path)
    return _mock_db


def get_mock_bucket(name: str) -> MockBucket:
    global _mock_bucket
    if _mock_bucket is None:
        _mock_bucket = MockBucket(name)
    return _mock_bucket
