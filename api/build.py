"""
Bundle 构建入口

读取已采集的模块使用记录，为每个静态资源包写出 bundle 文件。

Usage:
    python -m api.build frontend/Magento/luma/en_US adminhtml/Magento/backend/en_US

未传参数时使用 BUILD_PACKAGES 环境变量（逗号分隔），再退回 STATIC_PACKAGE。
任何构建错误都会以非零状态退出，部署流程据此决定是否中止。
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

from api.container import AppConfig, AppContext
from api.core import get_logger, setup_logging
from api.services.bundle_service import StaticPackage
from jsbundle import BundleBuildError

logger = get_logger(__name__)


def resolve_packages(argv: list[str], config: AppConfig) -> list[StaticPackage]:
    """命令行参数 > BUILD_PACKAGES > STATIC_PACKAGE"""
    values = argv or [p for p in os.getenv("BUILD_PACKAGES", "").split(",") if p.strip()]
    if not values:
        values = [config.static_package]
    return [StaticPackage.parse(value) for value in values]


async def run(argv: list[str]) -> int:
    config = AppConfig.from_env()
    packages = resolve_packages(argv, config)

    ctx = await AppContext.create(config)
    try:
        if config.mongodb_uri and not ctx.repository_manager.is_persistent:
            logger.error("MongoDB unavailable, refusing to build from an empty memory store")
            return 1

        for package in packages:
            written = await ctx.bundle_service.build(package)
            logger.info(f"Package {package.path}: {len(written)} bundle files written")
        return 0

    except BundleBuildError as e:
        logger.error(f"Bundle build failed: {e}")
        return 1

    finally:
        await ctx.shutdown()


def main() -> None:
    load_dotenv()
    setup_logging()
    sys.exit(asyncio.run(run(sys.argv[1:])))


if __name__ == "__main__":
    main()
