"""
Repository 与数据库单元测试

测试：
- UsageRecordRepository (Memory/MongoDB)
- Database 索引创建
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock
from pymongo.errors import DuplicateKeyError, OperationFailure

from api.models import COLLECTIONS, UsageRecordDocument
from api.services.database import DB_NAME, Database, get_database
from api.services.repositories import UsageRecordRepository, create_repository_manager
from jsbundle import UsageRecord


def make_mongo(collection):
    """构造 motor 客户端 mock：client[db][collection]"""
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=collection)
    client = MagicMock()
    client.__getitem__ = MagicMock(return_value=db)
    return client


# =============================================================================
# 内存模式
# =============================================================================


class TestMemoryUsageRecordRepository:
    """内存模式"""

    @pytest.mark.asyncio
    async def test_insert_ignore_is_idempotent(self):
        repo = UsageRecordRepository(None)

        assert await repo.insert_ignore("checkout", "mage/common", "mage/common.js") is True
        assert await repo.insert_ignore("checkout", "mage/common", "mage/common.js") is False
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_same_path_under_other_page_type(self):
        repo = UsageRecordRepository(None)

        await repo.insert_ignore("checkout", "mage/common", "mage/common.js")
        await repo.insert_ignore("catalog", "mage/common", "mage/common.js")

        assert await repo.count() == 2

    @pytest.mark.asyncio
    async def test_concurrent_reports_converge_to_one_row(self):
        repo = UsageRecordRepository(None)

        results = await asyncio.gather(
            *(repo.insert_ignore("checkout", "mage/common", "mage/common.js") for _ in range(20))
        )

        assert results.count(True) == 1
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_records_keep_insertion_order(self):
        repo = UsageRecordRepository(None)
        await repo.insert_ignore("checkout", "b", "b.js")
        await repo.insert_ignore("checkout", "a", "a.js")

        assert await repo.records() == [
            UsageRecord("checkout", "b", "b.js"),
            UsageRecord("checkout", "a", "a.js"),
        ]

    @pytest.mark.asyncio
    async def test_clear(self):
        repo = UsageRecordRepository(None)
        await repo.insert_ignore("checkout", "a", "a.js")

        assert await repo.clear() == 1
        assert await repo.count() == 0


# =============================================================================
# MongoDB 模式
# =============================================================================


class TestMongoUsageRecordRepository:
    """MongoDB 模式"""

    @pytest.fixture
    def collection(self):
        collection = MagicMock()
        collection.insert_one = AsyncMock()
        collection.count_documents = AsyncMock(return_value=3)
        collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=3))
        return collection

    @pytest.fixture
    def repo(self, collection):
        return UsageRecordRepository(Database(make_mongo(collection)))

    @pytest.mark.asyncio
    async def test_insert(self, repo, collection):
        assert repo.is_persistent
        assert await repo.insert_ignore("checkout", "a", "a.js") is True

        document = collection.insert_one.call_args[0][0]
        assert document["page_type"] == "checkout"
        assert document["dependency_name"] == "a"
        assert document["dependency_path"] == "a.js"

    @pytest.mark.asyncio
    async def test_duplicate_key_is_ignored(self, repo, collection):
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key error")

        assert await repo.insert_ignore("checkout", "a", "a.js") is False

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, repo, collection):
        collection.insert_one.side_effect = OperationFailure("not primary")

        with pytest.raises(OperationFailure):
            await repo.insert_ignore("checkout", "a", "a.js")

    @pytest.mark.asyncio
    async def test_list_all(self, repo, collection):
        cursor = MagicMock()
        cursor.sort = MagicMock(return_value=cursor)
        cursor.to_list = AsyncMock(return_value=[
            {"page_type": "checkout", "dependency_name": "a", "dependency_path": "a.js"},
        ])
        collection.find = MagicMock(return_value=cursor)

        records = await repo.records()

        assert records == [UsageRecord("checkout", "a", "a.js")]
        collection.find.assert_called_once_with({}, {"_id": 0})
        cursor.sort.assert_called_once_with("_id", 1)

    @pytest.mark.asyncio
    async def test_count_and_clear(self, repo):
        assert await repo.count() == 3
        assert await repo.clear() == 3


# =============================================================================
# Database
# =============================================================================


class TestDatabase:
    """Database 管理器"""

    def test_get_database_without_client(self):
        assert get_database(None) is None

    def test_collection_name(self):
        collection = MagicMock()
        client = make_mongo(collection)

        db = Database(client)

        assert db.js_bundles is collection
        client[DB_NAME].__getitem__.assert_called_with(COLLECTIONS.JS_BUNDLES)

    def test_disconnected_collection_raises(self):
        with pytest.raises(RuntimeError):
            Database(None).js_bundles

    @pytest.mark.asyncio
    async def test_ensure_indexes_creates_unique_key(self):
        collection = MagicMock()
        collection.create_index = AsyncMock()
        db = Database(make_mongo(collection))

        await db.ensure_indexes()

        unique_calls = [c for c in collection.create_index.call_args_list if c.kwargs["unique"]]
        assert len(unique_calls) == 1
        assert unique_calls[0].args[0] == [("page_type", 1), ("dependency_path", 1)]

    @pytest.mark.asyncio
    async def test_unique_index_failure_propagates(self):
        collection = MagicMock()
        collection.create_index = AsyncMock(side_effect=OperationFailure("E11000 duplicate key"))
        db = Database(make_mongo(collection))

        with pytest.raises(OperationFailure):
            await db.ensure_indexes()


class TestRepositoryManager:
    def test_memory_mode(self):
        manager = create_repository_manager(None)

        assert not manager.is_persistent
        assert not manager.usage_records.is_persistent


class TestUsageRecordDocument:
    def test_round_trip_with_record(self):
        record = UsageRecord("checkout", "a", "a.js")

        assert UsageRecordDocument.from_record(record).to_record() == record
