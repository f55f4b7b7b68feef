"""
MongoDB connection management.

This module provides:
- MongoDB client connection via Motor (async driver)
- Health check utilities
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from retroboard.config import MongoConfig

# Global MongoDB client instance
_client: Optional[AsyncIOMotorClient] = None
_config: MongoConfig = MongoConfig()


async def init_db(config: MongoConfig) -> None:
    """
    Initialize the MongoDB client.
    Connection is lazy; use check_db_connection() to verify reachability.
    """
    global _client, _config

    _config = config
    _client = AsyncIOMotorClient(
        config.url,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
    )


async def close_db() -> None:
    """
    Close MongoDB connection.
    """
    global _client
    if _client is not None:
        _client.close()
        _client = None


def get_client() -> AsyncIOMotorClient:
    """
    Get the MongoDB client instance.
    """
    if _client is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _client


def get_database() -> AsyncIOMotorDatabase:
    """
    Get the MongoDB database instance.
    """
    return get_client()[_config.database]


async def check_db_connection() -> bool:
    """
    Check if MongoDB connection is healthy.
    """
    if _client is None:
        return False

    try:
        await _client.admin.command("ping")
        return True
    except PyMongoError:
        return False


def get_db_info() -> dict:
    """
    Get database connection information and status.
    """
    return {
        "status": "connected" if _client is not None else "disconnected",
        "url": sanitize_mongodb_url(_config.url),
        "database": _config.database,
    }


def sanitize_mongodb_url(url: str) -> str:
    """
    Hide password in MongoDB URL for safe logging.
    """
    if "@" not in url or "://" not in url:
        return url

    protocol, rest = url.split("://", 1)
    if "@" not in rest:
        return url

    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    return url
