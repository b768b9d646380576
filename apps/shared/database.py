"""
Database configuration and client management

This module provides the basic MongoDB setup for database connectivity.
NO collections are defined here - this is just infrastructure.
"""

import logging

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "blog"
DEFAULT_TIMEOUT_MS = 5000


def create_client(uri: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> AsyncMongoClient:
    """
    Create an async MongoDB client.

    The client connects lazily, so this never blocks or fails on an
    unreachable server. tz_aware keeps stored dates in UTC on the way out.
    """
    return AsyncMongoClient(
        uri,
        serverSelectionTimeoutMS=timeout_ms,
        tz_aware=True,
    )


def get_database(client: AsyncMongoClient, default_name: str = DEFAULT_DB_NAME):
    """Database named in the connection string, else default_name."""
    return client.get_default_database(default=default_name)


async def check_db_connection(client: AsyncMongoClient) -> bool:
    """
    Test database connectivity
    Returns True if connection successful, False otherwise
    """
    try:
        await client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.debug(f"MongoDB ping failed: {e}")
        return False
