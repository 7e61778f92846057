"""
数据模型模块

单表设计：js_bundles
"""

from api.models.collections import COLLECTIONS, Collections
from api.models.documents import UsageRecordDocument
from api.models.schemas import (
    DependencyReport,
    DependencyResult,
    BundleSelection,
    HealthResponse,
)

__all__ = [
    "COLLECTIONS",
    "Collections",
    "UsageRecordDocument",
    # API 模型
    "DependencyReport",
    "DependencyResult",
    "BundleSelection",
    "HealthResponse",
]
