"""
Repository 层

提供数据表的读写操作，封装数据库访问逻辑
单表设计：js_bundles
"""

import logging
from abc import ABC
from typing import List

from pymongo.errors import DuplicateKeyError

from api.services.database import Database
from api.models import UsageRecordDocument
from jsbundle.records import UsageRecord

logger = logging.getLogger(__name__)


# =============================================================================
# 基础 Repository
# =============================================================================


class BaseRepository(ABC):
    """Repository 基类"""

    def __init__(self, db: Database | None):
        self._db = db

    @property
    def is_persistent(self) -> bool:
        """是否持久化存储"""
        return self._db is not None and self._db.is_connected


# =============================================================================
# UsageRecord Repository
# =============================================================================


class UsageRecordRepository(BaseRepository):
    """
    模块使用记录 Repository

    只追加：记录插入后不再修改，整表清空由 clear() 完成
    (page_type, dependency_path) 唯一，冲突的写入被忽略
    """

    def __init__(self, db: Database | None):
        super().__init__(db)
        self._memory_store: dict[tuple[str, str], UsageRecordDocument] = {}

    async def insert_ignore(
        self,
        page_type: str,
        dependency_name: str,
        dependency_path: str,
    ) -> bool:
        """
        插入记录，唯一键冲突时忽略

        Returns:
            是否新插入（False 表示记录已存在）
        """
        document = UsageRecordDocument(
            page_type=page_type,
            dependency_name=dependency_name,
            dependency_path=dependency_path,
        )

        if self.is_persistent:
            try:
                await self._db.js_bundles.insert_one(document.to_dict())
            except DuplicateKeyError:
                return False
            return True

        key = (page_type, dependency_path)
        if key in self._memory_store:
            return False
        self._memory_store[key] = document
        return True

    async def list_all(self) -> List[UsageRecordDocument]:
        """按插入顺序列出所有记录"""
        if self.is_persistent:
            cursor = self._db.js_bundles.find({}, {"_id": 0}).sort("_id", 1)
            docs = await cursor.to_list(length=None)
            return [UsageRecordDocument.from_dict(doc) for doc in docs]
        return list(self._memory_store.values())

    async def records(self) -> List[UsageRecord]:
        """所有记录（打包引擎格式）"""
        return [doc.to_record() for doc in await self.list_all()]

    async def count(self) -> int:
        """记录总数"""
        if self.is_persistent:
            return await self._db.js_bundles.count_documents({})
        return len(self._memory_store)

    async def clear(self) -> int:
        """清空所有记录，返回删除条数"""
        if self.is_persistent:
            result = await self._db.js_bundles.delete_many({})
            deleted = result.deleted_count
        else:
            deleted = len(self._memory_store)
            self._memory_store.clear()
        logger.info(f"Usage records cleared: {deleted}")
        return deleted


# =============================================================================
# Repository Manager
# =============================================================================


class RepositoryManager:
    """
    Repository 管理器

    统一管理所有 Repository 实例
    """

    def __init__(self, db: Database | None):
        self._db = db
        self._usage_records = UsageRecordRepository(db)

        logger.info(f"RepositoryManager initialized: persistent={self.is_persistent}")

    @property
    def usage_records(self) -> UsageRecordRepository:
        """模块使用记录 Repository"""
        return self._usage_records

    @property
    def is_persistent(self) -> bool:
        """是否持久化存储"""
        return self._db is not None and self._db.is_connected


def create_repository_manager(db: Database | None) -> RepositoryManager:
    """创建 Repository 管理器"""
    return RepositoryManager(db)
