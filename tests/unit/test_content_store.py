"""Unit tests for the document content store."""

import asyncio
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from app.core.errors import ContentStoreError, ContentStoreTimeoutError
from app.services.content_store import ContentStore


def make_collection() -> MagicMock:
    collection = MagicMock()
    collection.replace_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock()
    return collection


@pytest.mark.asyncio
class TestContentStore:
    """Tests for ContentStore operations."""

    async def test_save_upserts_and_returns_reference(self):
        collection = make_collection()
        store = ContentStore(collection, timeout=1)
        doc_id = uuid4()

        ref = await store.save(doc_id, "# Hello")

        assert ref == f"documents/{doc_id}/content"
        query, record = collection.replace_one.await_args.args
        assert query == {"_id": str(doc_id)}
        assert record["_id"] == str(doc_id)
        assert record["content"] == "# Hello"
        assert "updated_at" in record
        assert collection.replace_one.await_args.kwargs == {"upsert": True}

    async def test_get_returns_stored_content(self):
        collection = make_collection()
        collection.find_one.return_value = {"_id": "abc", "content": "body"}
        store = ContentStore(collection, timeout=1)

        assert await store.get("abc") == "body"
        collection.find_one.assert_awaited_once_with({"_id": "abc"})

    async def test_get_missing_returns_empty_string(self):
        store = ContentStore(make_collection(), timeout=1)

        assert await store.get("missing") == ""

    async def test_delete(self):
        collection = make_collection()
        store = ContentStore(collection, timeout=1)

        await store.delete("abc")

        collection.delete_one.assert_awaited_once_with({"_id": "abc"})

    async def test_slow_operation_times_out(self):
        collection = make_collection()

        async def slow_find(query):
            await asyncio.sleep(5)

        collection.find_one = slow_find
        store = ContentStore(collection, timeout=0.05)

        with pytest.raises(ContentStoreTimeoutError) as exc_info:
            await store.get("abc")

        assert exc_info.value.status_code == 503

    async def test_driver_error_is_wrapped(self):
        collection = make_collection()
        collection.replace_one.side_effect = ServerSelectionTimeoutError("no servers")
        store = ContentStore(collection, timeout=1)

        with pytest.raises(ContentStoreError) as exc_info:
            await store.save("abc", "x")

        assert "no servers" in exc_info.value.error

    async def test_delete_many_reports_failures(self):
        collection = make_collection()

        async def delete_one(query):
            if query["_id"] == "bad":
                raise ServerSelectionTimeoutError("down")

        collection.delete_one = delete_one
        store = ContentStore(collection, timeout=1)

        failed = await store.delete_many(["one", "bad", "two"])

        assert failed == ["bad"]

    async def test_delete_many_empty(self):
        store = ContentStore(make_collection(), timeout=1)

        assert await store.delete_many([]) == []
