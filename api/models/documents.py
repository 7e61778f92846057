"""
MongoDB 文档模型

js_bundles 表：每条记录表示某页面类型加载过某个模块
"""

from dataclasses import dataclass, field
from datetime import datetime

from jsbundle.records import UsageRecord


@dataclass
class UsageRecordDocument:
    """
    模块使用记录文档

    (page_type, dependency_path) 唯一；只插入，不更新
    """
    page_type: str                           # 页面类型（路由名）
    dependency_name: str                     # 模块 ID
    dependency_path: str                     # 模块文件相对路径
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "page_type": self.page_type,
            "dependency_name": self.dependency_name,
            "dependency_path": self.dependency_path,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UsageRecordDocument":
        return cls(
            page_type=data["page_type"],
            dependency_name=data["dependency_name"],
            dependency_path=data["dependency_path"],
            created_at=data.get("created_at", datetime.utcnow()),
        )

    @classmethod
    def from_record(cls, record: UsageRecord) -> "UsageRecordDocument":
        return cls(
            page_type=record.page_type,
            dependency_name=record.dependency_name,
            dependency_path=record.dependency_path,
        )

    def to_record(self) -> UsageRecord:
        """转换为打包引擎使用的记录"""
        return UsageRecord(
            page_type=self.page_type,
            dependency_name=self.dependency_name,
            dependency_path=self.dependency_path,
        )
