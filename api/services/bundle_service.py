"""
Bundle 构建服务

职责：
- 读取全部采集记录并分区（共享 / 页面专属）
- 为每个 area/theme/locale 包写出 bundle 文件
- 运行时按页面类型筛选 bundle 文件
"""

from dataclasses import dataclass

from api.core.logging import get_logger, LogContext
from api.services.repositories import UsageRecordRepository
from jsbundle import (
    BundlePartitioner,
    BundlerConfig,
    PartitionedModuleSet,
    RequireJsBundle,
    RuntimeBundleSelector,
    StaticDirectory,
    bundle_package,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class StaticPackage:
    """静态资源包：area/theme/locale"""

    area: str
    theme: str
    locale: str

    @classmethod
    def parse(cls, value: str) -> "StaticPackage":
        """
        解析 "frontend/Magento/luma/en_US" 形式的包路径

        theme 本身可以包含斜杠（vendor/theme）
        """
        parts = [p for p in value.strip().strip("/").split("/") if p]
        if len(parts) < 3:
            raise ValueError(f"Invalid static package: {value!r} (expected area/theme/locale)")
        return cls(area=parts[0], theme="/".join(parts[1:-1]), locale=parts[-1])

    @property
    def path(self) -> str:
        return f"{self.area}/{self.theme}/{self.locale}"


class BundleService:
    """
    Bundle 构建服务

    Usage:
        service = BundleService(repos.usage_records, LocalStaticDirectory("pub/static"), config)
        written = await service.build(StaticPackage.parse("frontend/Magento/luma/en_US"))
    """

    def __init__(
        self,
        repository: UsageRecordRepository,
        static_dir: StaticDirectory,
        config: BundlerConfig,
        app_mode: str = "default",
    ):
        self._repository = repository
        self._static_dir = static_dir
        self._config = config
        self._selector = RuntimeBundleSelector(app_mode, admin_route=config.admin_route)

    async def partition(self) -> PartitionedModuleSet:
        """读取全部记录并完整重新分区"""
        records = await self._repository.records()
        partition = BundlePartitioner().partition(records)
        logger.info(
            f"Partitioned {len(records)} records: default={len(partition.default)}, "
            f"page_types={len(partition.per_page_type)}"
        )
        return partition

    async def build(self, package: StaticPackage) -> list[str]:
        """构建单个包的 bundle 文件，任何错误都会中止构建"""
        with LogContext.operation("bundle", package=package.path):
            partition = await self.partition()
            bundle = RequireJsBundle(
                static_dir=self._static_dir,
                config=self._config,
                area=package.area,
                theme=package.theme,
                locale=package.locale,
                partition=partition,
            )
            return bundle_package(bundle)

    def list_bundles(self, package: StaticPackage) -> list[str]:
        """列出包内已生成的 bundle 文件"""
        bundle_dir = f"{package.path}/{self._config.bundle_dir}"
        return self._static_dir.list_files(bundle_dir)

    def select_bundles(self, package: StaticPackage, page_type: str) -> list[str]:
        """当前页面类型需要引用的 bundle 文件"""
        return self._selector.select(self.list_bundles(package), page_type)
