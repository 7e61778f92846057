"""
MongoDB 访问入口

单表设计：js_bundles
"""

import logging
from typing import Any

from pymongo.errors import OperationFailure

from api.models.collections import COLLECTIONS
from api.services.database.config import DB_NAME, INDEX_DEFINITIONS

logger = logging.getLogger(__name__)


class Database:
    """
    Usage:
        db = Database(mongo_client)
        await db.ensure_indexes()
        await db.js_bundles.find_one({"page_type": "checkout"})
    """

    def __init__(self, mongo_client: Any | None, db_name: str = DB_NAME):
        self._db = mongo_client[db_name] if mongo_client is not None else None
        self._indexed = False

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    def collection(self, name: str) -> Any:
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db[name]

    @property
    def js_bundles(self) -> Any:
        """模块使用记录"""
        return self.collection(COLLECTIONS.JS_BUNDLES)

    async def ensure_indexes(self) -> None:
        """
        创建 INDEX_DEFINITIONS 中的索引（幂等）

        唯一索引保证并发采集不产生重复记录，创建失败时直接抛出；
        普通索引已存在（或选项冲突）时跳过。
        """
        if self._db is None or self._indexed:
            return

        for collection_name, index_name, fields, unique, options in INDEX_DEFINITIONS:
            try:
                await self._db[collection_name].create_index(
                    fields, name=index_name, unique=unique, **options
                )
            except OperationFailure as e:
                message = str(e).lower()
                if unique or not ("already exists" in message or "indexoptionsconflict" in message):
                    raise
                logger.debug(f"Index already exists: {collection_name}.{index_name}")

        self._indexed = True
        logger.info(f"Indexes ready: {len(INDEX_DEFINITIONS)} definitions")


def get_database(mongo_client: Any | None, db_name: str = DB_NAME) -> Database | None:
    """未配置客户端时返回 None（内存模式）"""
    if mongo_client is None:
        return None
    return Database(mongo_client, db_name)
