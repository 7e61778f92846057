"""
模块使用采集服务

职责：
- 过滤已打包文件与跨域资源
- 规范化模块路径，推导 RequireJS 模块 ID
- 幂等写入 js_bundles（重复上报直接忽略）
"""

import re
from dataclasses import dataclass
from typing import Any

from api.core.logging import get_logger, LogContext
from api.models import DependencyReport
from api.services.repositories import UsageRecordRepository
from jsbundle.config import BundlerConfig, apply_rewrites
from jsbundle.wrapping import TEMPLATE_PREFIX

logger = get_logger(__name__)

_ABSOLUTE_URL = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*:)?//")


@dataclass
class CollectionStats:
    """单次上报的处理统计"""

    received: int = 0
    stored: int = 0
    duplicates: int = 0
    skipped: int = 0


class UsageCollector:
    """
    模块使用采集器

    Usage:
        collector = UsageCollector(repos.usage_records, config)
        stats = await collector.collect(report)
    """

    def __init__(self, repository: UsageRecordRepository, config: BundlerConfig):
        self._repository = repository
        self._config = config
        self._bundle_marker = config.bundle_dir.rstrip("/") + "/"

    def is_collectable(self, path: str) -> bool:
        """已打包文件和绝对 URL 不参与采集"""
        return self._bundle_marker not in path and not _ABSOLUTE_URL.match(path)

    def normalize_path(self, path: str) -> str:
        """还原未压缩文件名并执行路径改写规则"""
        return apply_rewrites(path, self._config.path_rewrites)

    def module_id(self, path: str, paths: dict[str, Any]) -> str | None:
        """
        推导模块 ID

        - .html: "text!" + 路径
        - .js: 去掉扩展名后在 paths 中查找别名，未命中则使用路径本身
          （数组形式的 fallback 配置不参与匹配）
        - 其他: None（不采集）
        """
        if path.endswith(".html"):
            return TEMPLATE_PREFIX + path
        if not path.endswith(".js"):
            return None

        module_path = path[: -len(".js")]
        for alias, target in paths.items():
            if isinstance(target, str) and target == module_path:
                return self._config.alias_rewrites.get(alias, alias)
        return apply_rewrites(module_path, self._config.id_fixups)

    async def collect(self, report: DependencyReport) -> CollectionStats:
        """处理一次上报，单条失败不影响整体"""
        stats = CollectionStats(received=len(report.deps))

        with LogContext(page_type=report.route):
            for raw_path in report.deps:
                if not self.is_collectable(raw_path):
                    stats.skipped += 1
                    logger.debug(f"Skip non-collectable path: {raw_path}")
                    continue

                path = self.normalize_path(raw_path)
                module_id = self.module_id(path, report.paths)
                if not module_id:
                    stats.skipped += 1
                    logger.debug(f"Skip path without module id: {path}")
                    continue

                inserted = await self._repository.insert_ignore(
                    page_type=report.route,
                    dependency_name=module_id,
                    dependency_path=path,
                )
                if inserted:
                    stats.stored += 1
                else:
                    stats.duplicates += 1

            logger.info(
                f"Dependencies collected: received={stats.received}, stored={stats.stored}, "
                f"duplicates={stats.duplicates}, skipped={stats.skipped}"
            )

        return stats
