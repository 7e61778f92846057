"""
JS bundle 优化

根据各页面类型的模块使用记录，生成按依赖排序并受尺寸限制的 RequireJS bundle 文件。
"""

from jsbundle.config import BundlerConfig, ShimEntry, load_config
from jsbundle.exceptions import (
    BundleBuildError,
    BundleWriteError,
    DependencyCycleError,
    MissingModuleContentError,
)
from jsbundle.filesystem import LocalStaticDirectory, StaticDirectory
from jsbundle.minification import Minification
from jsbundle.ordering import DependencyExtractor, DependencyOrderer, RegexDependencyExtractor
from jsbundle.package import bundle_package, package_files
from jsbundle.partitioner import DEFAULT_BUCKET, BundlePartitioner, PartitionedModuleSet
from jsbundle.records import UsageRecord
from jsbundle.selector import RuntimeBundleSelector
from jsbundle.wrapping import ContentWrapper, RuntimeShimConfig, ShimConfig, StaticShimConfig
from jsbundle.writer import BundleRegistryEntry, RequireJsBundle

__all__ = [
    "BundlerConfig",
    "ShimEntry",
    "load_config",
    "BundleBuildError",
    "BundleWriteError",
    "DependencyCycleError",
    "MissingModuleContentError",
    "LocalStaticDirectory",
    "StaticDirectory",
    "Minification",
    "DependencyExtractor",
    "DependencyOrderer",
    "RegexDependencyExtractor",
    "bundle_package",
    "package_files",
    "DEFAULT_BUCKET",
    "BundlePartitioner",
    "PartitionedModuleSet",
    "UsageRecord",
    "RuntimeBundleSelector",
    "ContentWrapper",
    "RuntimeShimConfig",
    "ShimConfig",
    "StaticShimConfig",
    "BundleRegistryEntry",
    "RequireJsBundle",
]
