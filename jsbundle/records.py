"""
采集接口记录的模块使用数据

一条记录表示：页面类型 X 请求了路径 Y 上的模块，该模块在 loader 中的 ID 为 Z。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UsageRecord:
    """一次 (page_type, dependency_path) 观测"""

    page_type: str
    dependency_name: str  # 模块 ID
    dependency_path: str  # 相对文件路径

    @property
    def key(self) -> tuple[str, str]:
        """记录的唯一键"""
        return (self.page_type, self.dependency_path)
