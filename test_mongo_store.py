"""
Tests for MongoPostStore queries

The store runs against an in-memory stand-in for an async pymongo
collection, so the query chain and error mapping are exercised without a
MongoDB server.
"""
import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ServerSelectionTimeoutError

from apps.blog.main import create_app
from apps.blog.schemas import PLACEHOLDER_IMAGE_URL
from apps.blog.store import MongoPostStore, StoreError


class FakeCursor:
    def __init__(self, documents, error=None):
        self.documents = list(documents)
        self.error = error
        self.calls = []

    def sort(self, key, direction=ASCENDING):
        self.calls.append(("sort", key, direction))
        self.documents.sort(key=lambda d: d[key], reverse=direction == DESCENDING)
        return self

    def skip(self, count):
        self.calls.append(("skip", count))
        self.documents = self.documents[count:]
        return self

    def limit(self, count):
        self.calls.append(("limit", count))
        self.documents = self.documents[:count]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self.error:
            raise self.error
        for document in self.documents:
            yield dict(document)


class FakeCollection:
    """Dict-backed collection answering the calls MongoPostStore makes"""

    def __init__(self, documents=()):
        self.documents = [dict(d) for d in documents]
        self.indexes = []
        self.cursors = []

    def _match(self, query):
        for document in self.documents:
            if all(document.get(k) == v for k, v in query.items()):
                return document
        return None

    async def create_index(self, keys):
        self.indexes.append(keys)

    async def insert_one(self, document):
        stored = dict(document)
        stored["_id"] = ObjectId()
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def find(self, query=None):
        cursor = FakeCursor(self.documents)
        self.cursors.append(cursor)
        return cursor

    async def find_one(self, query):
        document = self._match(query)
        return dict(document) if document else None

    async def find_one_and_delete(self, query):
        document = self._match(query)
        if document is None:
            return None
        self.documents.remove(document)
        return dict(document)


class UnreachableCollection:
    """Collection whose every call fails the way an unreachable server does"""

    error = ServerSelectionTimeoutError("localhost:27017: connection refused")

    async def create_index(self, keys):
        raise self.error

    async def insert_one(self, document):
        raise self.error

    def find(self, query=None):
        return FakeCursor([], error=self.error)

    async def find_one(self, query):
        raise self.error

    async def find_one_and_delete(self, query):
        raise self.error


def document(title, year, **extra):
    return {
        "_id": ObjectId(),
        "title": title,
        "summary": "s",
        "content": "c",
        "imageUrl": "./img.png",
        "date": datetime(year, 1, 1, tzinfo=timezone.utc),
        **extra,
    }


def run(coroutine):
    return asyncio.run(coroutine)


def test_create_inserts_document_and_returns_inserted_id():
    collection = FakeCollection()
    store = MongoPostStore(collection)

    post = run(store.create({"title": "A", "summary": "B", "content": "C"}))

    assert len(collection.documents) == 1
    stored = collection.documents[0]
    assert post.id == str(stored["_id"])
    assert stored["title"] == "A"
    assert stored["imageUrl"] == PLACEHOLDER_IMAGE_URL
    assert isinstance(stored["date"], datetime)
    assert post.image_url == PLACEHOLDER_IMAGE_URL


def test_list_all_sorts_by_date_descending():
    collection = FakeCollection([document("2021", 2021), document("2023", 2023), document("2022", 2022)])
    store = MongoPostStore(collection)

    posts = run(store.list_all())

    assert [p.title for p in posts] == ["2023", "2022", "2021"]
    assert ("sort", "date", DESCENDING) in collection.cursors[-1].calls
    assert not any(call[0] == "limit" for call in collection.cursors[-1].calls)


def test_list_all_applies_offset_and_limit():
    collection = FakeCollection([document(str(year), year) for year in range(2019, 2025)])
    store = MongoPostStore(collection)

    posts = run(store.list_all(limit=2, offset=1))

    assert [p.title for p in posts] == ["2023", "2022"]
    assert collection.cursors[-1].calls == [("sort", "date", DESCENDING), ("skip", 1), ("limit", 2)]


def test_get_by_id():
    stored = document("kept", 2024)
    collection = FakeCollection([stored])
    store = MongoPostStore(collection)

    post = run(store.get_by_id(str(stored["_id"])))

    assert post.id == str(stored["_id"])
    assert post.title == "kept"
    assert run(store.get_by_id(str(ObjectId()))) is None
    assert run(store.get_by_id("not-an-id")) is None


def test_delete_by_id_returns_removed_post():
    stored = document("gone", 2024)
    other = document("other", 2023)
    collection = FakeCollection([stored, other])
    store = MongoPostStore(collection)

    deleted = run(store.delete_by_id(str(stored["_id"])))

    assert deleted.title == "gone"
    assert [d["_id"] for d in collection.documents] == [other["_id"]]
    assert run(store.delete_by_id(str(stored["_id"]))) is None
    assert run(store.delete_by_id("not-an-id")) is None


def test_ensure_indexes_creates_descending_date_index():
    collection = FakeCollection()

    run(MongoPostStore(collection).ensure_indexes())

    assert collection.indexes == [[("date", DESCENDING)]]


@pytest.mark.parametrize(
    "operation",
    [
        lambda store: store.ensure_indexes(),
        lambda store: store.create({"title": "A", "summary": "B", "content": "C"}),
        lambda store: store.list_all(),
        lambda store: store.get_by_id(str(ObjectId())),
        lambda store: store.delete_by_id(str(ObjectId())),
    ],
)
def test_driver_errors_become_store_errors(operation):
    store = MongoPostStore(UnreachableCollection())

    with pytest.raises(StoreError) as excinfo:
        run(operation(store))

    assert isinstance(excinfo.value.__cause__, ServerSelectionTimeoutError)


def test_list_all_with_malformed_document_raises_store_error():
    broken = document("broken", 2024)
    del broken["content"]
    store = MongoPostStore(FakeCollection([document("fine", 2023), broken]))

    with pytest.raises(StoreError):
        run(store.list_all())


def test_store_without_client_reports_disconnected():
    store = MongoPostStore(FakeCollection())

    assert run(store.ping()) is False
    run(store.close())


def test_api_over_mongo_store(static_dir):
    legacy = document("legacy", 2020)
    del legacy["imageUrl"]
    collection = FakeCollection([legacy])
    app = create_app(store=MongoPostStore(collection), static_dir=static_dir)

    with TestClient(app) as client:
        created = client.post("/api/posts", json={"title": "A", "summary": "B", "content": "C"})
        assert created.status_code == 201
        post_id = created.json()["id"]

        listed = client.get("/api/posts").json()
        assert [p["title"] for p in listed] == ["A", "legacy"]
        assert listed[1]["imageUrl"] == PLACEHOLDER_IMAGE_URL

        assert client.get(f"/api/posts/{post_id}").json()["title"] == "A"
        assert client.delete(f"/api/posts/{post_id}").status_code == 200
        assert client.get(f"/api/posts/{post_id}").status_code == 404


def test_api_malformed_stored_post_returns_generic_500(static_dir):
    broken = document("broken", 2024)
    del broken["title"]
    app = create_app(store=MongoPostStore(FakeCollection([broken])), static_dir=static_dir)

    with TestClient(app) as client:
        listed = client.get("/api/posts")
        fetched = client.get(f"/api/posts/{broken['_id']}")

    assert listed.status_code == 500
    assert listed.json() == {"message": "Error retrieving posts."}
    assert fetched.status_code == 500
    assert fetched.json() == {"message": "Error retrieving post."}
