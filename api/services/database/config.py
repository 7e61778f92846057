"""
数据库配置和索引定义

定义数据库名称、集合名称和索引配置
"""

from api.models.collections import COLLECTIONS

# 数据库名称
DB_NAME = "js_bundle"


# 索引定义：(集合名, 索引名, 索引字段, 是否唯一, 其他选项)
INDEX_DEFINITIONS = [
    # ==========================================================================
    # js_bundles 索引
    # ==========================================================================
    # 唯一约束：并发上报同一 (page_type, dependency_path) 只保留一条
    (COLLECTIONS.JS_BUNDLES, "uniq_page_type_path", [("page_type", 1), ("dependency_path", 1)], True, {}),
    # 按模块路径统计出现的页面类型数
    (COLLECTIONS.JS_BUNDLES, "idx_dependency_path", [("dependency_path", 1)], False, {}),
]
