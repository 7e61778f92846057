"""
应用上下文容器

设计原则：
- 使用 AppContext 类封装所有服务实例，避免全局变量散落
- 单例模式通过类变量实现，保证全局唯一
- 清晰的生命周期管理（create / shutdown）
- 与 FastAPI 依赖注入系统兼容
- 易于测试（可以创建独立的上下文实例）
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import Depends
from pymongo.errors import PyMongoError

from api.services.bundle_service import BundleService, StaticPackage
from api.services.database import DB_NAME, Database, get_database as create_database
from api.services.repositories import RepositoryManager, create_repository_manager
from api.services.usage_collector import UsageCollector
from jsbundle import BundlerConfig, LocalStaticDirectory, load_config

logger = logging.getLogger(__name__)


# =============================================================================
# 配置
# =============================================================================


@dataclass
class AppConfig:
    """应用配置"""

    # Database
    mongodb_uri: str | None = None
    mongodb_db: str = DB_NAME

    # 运行模式：default | developer | production
    app_mode: str = "default"

    # 静态资源
    static_dir: str = "pub/static"
    static_package: str = "frontend/Magento/luma/en_US"
    bundler_config_file: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """从环境变量创建配置"""
        return cls(
            mongodb_uri=os.getenv("MONGODB_URI"),
            mongodb_db=os.getenv("MONGODB_DB", DB_NAME),
            app_mode=os.getenv("APP_MODE", "default"),
            static_dir=os.getenv("STATIC_DIR", "pub/static"),
            static_package=os.getenv("STATIC_PACKAGE", "frontend/Magento/luma/en_US"),
            bundler_config_file=os.getenv("BUNDLER_CONFIG"),
        )


# =============================================================================
# 应用上下文
# =============================================================================


@dataclass
class AppContext:
    """
    应用上下文容器

    封装所有服务实例，提供统一的生命周期管理。

    Usage:
        ```python
        ctx = await AppContext.create()

        stats = await ctx.usage_collector.collect(report)
        await ctx.bundle_service.build(StaticPackage.parse("frontend/Magento/luma/en_US"))

        await ctx.shutdown()
        ```
    """

    config: AppConfig = field(default_factory=AppConfig)

    # 基础设施
    mongo_client: Any = field(default=None, repr=False)
    database: Database | None = None
    repository_manager: RepositoryManager | None = None
    bundler_config: BundlerConfig = field(default_factory=BundlerConfig)

    # 业务服务
    usage_collector: UsageCollector | None = None
    bundle_service: BundleService | None = None

    started_at: float = field(default_factory=time.time)

    # 单例
    _instance: "AppContext | None" = field(default=None, init=False, repr=False)

    @classmethod
    async def create(cls, config: AppConfig | None = None) -> "AppContext":
        """创建并初始化应用上下文"""
        if cls._instance is not None:
            return cls._instance

        config = config or AppConfig.from_env()
        ctx = cls(config=config)
        ctx.bundler_config = load_config(config.bundler_config_file)

        await ctx._init_database(config)
        ctx._init_repository_manager()
        ctx._init_services(config)

        cls._instance = ctx
        logger.info(f"AppContext initialized - mode={config.app_mode}, static_dir={config.static_dir}")
        return ctx

    async def _init_database(self, config: AppConfig) -> None:
        """初始化数据库"""
        if not config.mongodb_uri:
            logger.info("Database: memory mode (set MONGODB_URI to enable MongoDB)")
            return

        from motor.motor_asyncio import AsyncIOMotorClient

        logger.info(f"Connecting to MongoDB: {config.mongodb_uri}")
        try:
            self.mongo_client = AsyncIOMotorClient(
                config.mongodb_uri,
                serverSelectionTimeoutMS=3000,  # 3秒超时，快速失败
            )
            await self.mongo_client.admin.command("ping")

            self.database = create_database(self.mongo_client, config.mongodb_db)
            await self.database.ensure_indexes()
            logger.info(f"Database: mongodb/{config.mongodb_db}")

        except PyMongoError as e:
            logger.warning(
                f"MongoDB connection failed ({config.mongodb_uri}): {e}. "
                f"Falling back to memory mode."
            )
            if self.mongo_client:
                self.mongo_client.close()
            self.mongo_client = None
            self.database = None

    def _init_repository_manager(self) -> None:
        """初始化 RepositoryManager"""
        self.repository_manager = create_repository_manager(self.database)

    def _init_services(self, config: AppConfig) -> None:
        """初始化业务服务"""
        self.usage_collector = UsageCollector(
            self.repository_manager.usage_records,
            self.bundler_config,
        )
        self.bundle_service = BundleService(
            repository=self.repository_manager.usage_records,
            static_dir=LocalStaticDirectory(config.static_dir),
            config=self.bundler_config,
            app_mode=config.app_mode,
        )

    @property
    def static_package(self) -> StaticPackage:
        """当前服务对应的静态资源包"""
        return StaticPackage.parse(self.config.static_package)

    @property
    def uptime(self) -> float:
        return time.time() - self.started_at

    async def shutdown(self) -> None:
        """关闭所有服务"""
        if self.mongo_client:
            self.mongo_client.close()
            self.mongo_client = None

        AppContext._instance = None
        logger.info("AppContext shutdown")

    @classmethod
    def get_instance(cls) -> "AppContext":
        """获取单例"""
        if cls._instance is None:
            raise RuntimeError("AppContext not initialized")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """重置单例（测试用）"""
        cls._instance = None


# =============================================================================
# FastAPI 依赖注入
# =============================================================================


def get_app_context() -> AppContext:
    return AppContext.get_instance()


def get_repository_manager() -> RepositoryManager:
    ctx = AppContext.get_instance()
    if ctx.repository_manager is None:
        raise RuntimeError("RepositoryManager not initialized")
    return ctx.repository_manager


def get_usage_collector() -> UsageCollector:
    ctx = AppContext.get_instance()
    if ctx.usage_collector is None:
        raise RuntimeError("UsageCollector not initialized")
    return ctx.usage_collector


def get_bundle_service() -> BundleService:
    ctx = AppContext.get_instance()
    if ctx.bundle_service is None:
        raise RuntimeError("BundleService not initialized")
    return ctx.bundle_service


# =============================================================================
# 依赖类型别名
# =============================================================================

AppContextDep = Annotated[AppContext, Depends(get_app_context)]
RepositoryManagerDep = Annotated[RepositoryManager, Depends(get_repository_manager)]
UsageCollectorDep = Annotated[UsageCollector, Depends(get_usage_collector)]
BundleServiceDep = Annotated[BundleService, Depends(get_bundle_service)]
