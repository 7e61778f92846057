"""
集合名称定义

定义 MongoDB 集合名称常量
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Collections:
    """
    集合名称定义

    - js_bundles: 各页面类型实际加载的模块（page_type + dependency_path 唯一）
    """

    JS_BUNDLES = "js_bundles"              # 模块使用记录


# 全局实例
COLLECTIONS = Collections()
