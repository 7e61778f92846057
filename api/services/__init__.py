"""
业务服务模块

提供数据库管理、模块使用采集、bundle 构建等功能
"""

from api.services.database import (
    DB_NAME,
    COLLECTIONS,
    Database,
    get_database,
)
from api.services.repositories import (
    RepositoryManager,
    UsageRecordRepository,
    create_repository_manager,
)
from api.services.usage_collector import UsageCollector, CollectionStats
from api.services.bundle_service import BundleService, StaticPackage
from api.services.instrumentation import render_script

__all__ = [
    # 数据库
    "DB_NAME",
    "COLLECTIONS",
    "Database",
    "get_database",
    # Repository
    "RepositoryManager",
    "UsageRecordRepository",
    "create_repository_manager",
    # 采集
    "UsageCollector",
    "CollectionStats",
    # 构建
    "BundleService",
    "StaticPackage",
    "render_script",
]
