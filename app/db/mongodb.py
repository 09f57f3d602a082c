"""MongoDB database connection and client management."""

import logging

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from app.config import settings

logger = logging.getLogger(__name__)

# Global MongoDB client and database
mongodb_client: AsyncIOMotorClient | None = None
mongodb_database: AsyncIOMotorDatabase | None = None

CONTENT_COLLECTION = "document_contents"


async def init_mongodb() -> None:
    """Initialize MongoDB connection."""
    global mongodb_client, mongodb_database

    mongodb_client = AsyncIOMotorClient(
        settings.MONGODB_URL,
        serverSelectionTimeoutMS=int(settings.CONTENT_STORE_TIMEOUT_SECONDS * 1000),
    )
    mongodb_database = mongodb_client[settings.MONGODB_DATABASE]

    # Index creation is best effort so a cold MongoDB does not block startup
    try:
        await mongodb_database[CONTENT_COLLECTION].create_index([("updated_at", -1)])
    except Exception as e:
        logger.warning("Could not create MongoDB indexes (non-fatal): %s", e)


async def close_mongodb() -> None:
    """Close MongoDB connection."""
    global mongodb_client

    if mongodb_client:
        mongodb_client.close()


def get_mongodb() -> AsyncIOMotorDatabase:
    """Get MongoDB database instance."""
    if mongodb_database is None:
        raise RuntimeError("MongoDB is not initialized")
    return mongodb_database


def get_content_collection() -> AsyncIOMotorCollection:
    """Get the document content collection."""
    return get_mongodb()[CONTENT_COLLECTION]
