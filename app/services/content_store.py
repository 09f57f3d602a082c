"""Document content store backed by a MongoDB collection."""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import Any, TypeVar
from uuid import UUID

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from app.config import settings
from app.core.errors import ContentStoreError, ContentStoreTimeoutError
from app.db.mongodb import get_content_collection
from app.models.nosql.content import DocumentContent, content_ref_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContentStore:
    """Keyed store for document bodies.

    Every operation is bounded by ``timeout`` seconds and fails fast with
    ``ContentStoreTimeoutError`` when the budget is exceeded.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        timeout: float | None = None,
    ):
        self.collection = collection
        self.timeout = timeout if timeout is not None else settings.CONTENT_STORE_TIMEOUT_SECONDS

    async def _run(self, operation: str, doc_id: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Content store %s timed out for doc %s", operation, doc_id)
            raise ContentStoreTimeoutError()
        except PyMongoError as e:
            logger.error("Content store %s failed for doc %s: %s", operation, doc_id, e)
            raise ContentStoreError(error=str(e))

    async def save(self, doc_id: UUID | str, content: str) -> str:
        """Store ``content`` for a document and return its reference path."""
        key = str(doc_id)
        record = DocumentContent(doc_id=key, content=content)
        await self._run(
            "save",
            key,
            self.collection.replace_one({"_id": key}, record.to_mongo(), upsert=True),
        )
        logger.info("Saved content for doc %s", key)
        return content_ref_for(key)

    async def get(self, doc_id: UUID | str) -> str:
        """Return the stored body, or an empty string when none exists."""
        key = str(doc_id)
        data: dict[str, Any] | None = await self._run(
            "get", key, self.collection.find_one({"_id": key})
        )
        if not data:
            logger.info("No content found for doc %s", key)
            return ""
        return DocumentContent.from_mongo(data).content

    async def delete(self, doc_id: UUID | str) -> None:
        """Remove the stored body of a document."""
        key = str(doc_id)
        await self._run("delete", key, self.collection.delete_one({"_id": key}))
        logger.info("Deleted content for doc %s", key)

    async def delete_many(self, doc_ids: Iterable[UUID | str]) -> list[str]:
        """Delete several bodies in parallel.

        Failures are logged per document and do not stop the others.
        Returns the ids whose delete failed.
        """
        keys = [str(doc_id) for doc_id in doc_ids]
        results = await asyncio.gather(
            *(self.delete(key) for key in keys), return_exceptions=True
        )
        failed = []
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                logger.warning("Could not delete content for doc %s: %s", key, result)
                failed.append(key)
        return failed


def get_content_store() -> ContentStore:
    """Dependency providing the content store."""
    return ContentStore(get_content_collection())
