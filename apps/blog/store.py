"""
Blog post storage.

MongoDB-backed store plus an in-memory implementation with the same
semantics for development and tests.
"""
import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import DESCENDING, AsyncMongoClient
from pymongo.errors import PyMongoError

from apps.blog.schemas import PLACEHOLDER_IMAGE_URL, BlogPost, PostCreate
from apps.shared.database import (
    DEFAULT_DB_NAME,
    DEFAULT_TIMEOUT_MS,
    check_db_connection,
    create_client,
    get_database,
)

logger = logging.getLogger(__name__)

COLLECTION_NAME = "blogposts"


class StoreError(Exception):
    """Raised when the backing store fails for reasons other than bad input."""


class PostValidationError(ValueError):
    """Raised when post fields are missing, empty or of the wrong type."""


class PostStore(Protocol):
    """Interface for blog post persistence."""

    async def create(self, fields: Any) -> BlogPost:
        ...

    async def list_all(self, limit: Optional[int] = None, offset: int = 0) -> list[BlogPost]:
        ...

    async def get_by_id(self, post_id: str) -> Optional[BlogPost]:
        ...

    async def delete_by_id(self, post_id: str) -> Optional[BlogPost]:
        ...

    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...


def parse_object_id(post_id: str) -> Optional[ObjectId]:
    """Return the ObjectId for a 24-hex string, or None if malformed."""
    if not isinstance(post_id, str):
        return None
    try:
        return ObjectId(post_id)
    except InvalidId:
        return None


def truncate_to_millis(value: datetime) -> datetime:
    """BSON dates only keep millisecond precision."""
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def validate_post(fields: Any) -> PostCreate:
    """Validate raw create fields, applying the imageUrl and date defaults."""
    if isinstance(fields, PostCreate):
        return fields
    try:
        return PostCreate.model_validate(fields)
    except ValidationError as e:
        raise PostValidationError(str(e)) from e


def to_document(post: PostCreate) -> dict:
    """Convert a validated post into a MongoDB document (without _id)."""
    return {
        "title": post.title,
        "summary": post.summary,
        "content": post.content,
        "imageUrl": post.image_url,
        "date": truncate_to_millis(post.date),
    }


def from_document(document: dict) -> BlogPost:
    """
    Convert a MongoDB document into a BlogPost.

    A missing imageUrl gets the placeholder, as older rows may predate it.
    Any other missing or malformed field raises StoreError.
    """
    try:
        return BlogPost(
            id=str(document["_id"]),
            title=document["title"],
            summary=document["summary"],
            content=document["content"],
            image_url=document.get("imageUrl", PLACEHOLDER_IMAGE_URL),
            date=document["date"],
        )
    except (KeyError, ValidationError) as e:
        raise StoreError(f"Malformed post document {document.get('_id')}") from e


class MongoPostStore:
    """Blog posts in a single MongoDB collection."""

    def __init__(self, collection, client: Optional[AsyncMongoClient] = None):
        self.collection = collection
        self.client = client

    @classmethod
    def from_uri(
        cls,
        uri: str,
        db_name: str = DEFAULT_DB_NAME,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> "MongoPostStore":
        """Store over the blogposts collection of the database at uri."""
        client = create_client(uri, timeout_ms=timeout_ms)
        return cls(get_database(client, db_name)[COLLECTION_NAME], client=client)

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index([("date", DESCENDING)])
        except PyMongoError as e:
            raise StoreError("Could not create indexes") from e

    async def create(self, fields: Any) -> BlogPost:
        post = validate_post(fields)
        document = to_document(post)
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise StoreError("Insert failed") from e
        document["_id"] = result.inserted_id
        logger.info(f"Created post {result.inserted_id}")
        return from_document(document)

    async def list_all(self, limit: Optional[int] = None, offset: int = 0) -> list[BlogPost]:
        cursor = self.collection.find().sort("date", DESCENDING).skip(offset)
        if limit is not None:
            cursor = cursor.limit(limit)
        try:
            return [from_document(doc) async for doc in cursor]
        except PyMongoError as e:
            raise StoreError("Find failed") from e

    async def get_by_id(self, post_id: str) -> Optional[BlogPost]:
        object_id = parse_object_id(post_id)
        if object_id is None:
            return None
        try:
            document = await self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            raise StoreError("Find failed") from e
        return from_document(document) if document else None

    async def delete_by_id(self, post_id: str) -> Optional[BlogPost]:
        object_id = parse_object_id(post_id)
        if object_id is None:
            return None
        try:
            document = await self.collection.find_one_and_delete({"_id": object_id})
        except PyMongoError as e:
            raise StoreError("Delete failed") from e
        if document:
            logger.info(f"Deleted post {object_id}")
        return from_document(document) if document else None

    async def ping(self) -> bool:
        if self.client is None:
            return False
        return await check_db_connection(self.client)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


class InMemoryPostStore:
    """Simple in-memory post store for development and tests."""

    def __init__(self):
        self.posts: dict[str, BlogPost] = {}

    async def create(self, fields: Any) -> BlogPost:
        post = validate_post(fields)
        document = to_document(post)
        document["_id"] = ObjectId()
        stored = from_document(document)
        self.posts[stored.id] = stored
        return stored

    async def list_all(self, limit: Optional[int] = None, offset: int = 0) -> list[BlogPost]:
        posts = sorted(self.posts.values(), key=lambda p: p.date, reverse=True)
        end = None if limit is None else offset + limit
        return posts[offset:end]

    async def get_by_id(self, post_id: str) -> Optional[BlogPost]:
        object_id = parse_object_id(post_id)
        if object_id is None:
            return None
        return self.posts.get(str(object_id))

    async def delete_by_id(self, post_id: str) -> Optional[BlogPost]:
        object_id = parse_object_id(post_id)
        if object_id is None:
            return None
        return self.posts.pop(str(object_id), None)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
