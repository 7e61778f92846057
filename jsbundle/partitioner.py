"""
把采集到的模块划分为公共 bundle 与页面专属 bundle

所有页面类型都请求过的模块进入公共（"default"）分区，
其余模块留在请求它的页面类型分区中。
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from jsbundle.records import UsageRecord

DEFAULT_BUCKET = "default"


@dataclass
class PartitionedModuleSet:
    """
    分区结果

    每个分区为 dependency_path -> dependency_name，保持首次出现的顺序
    """

    default: dict[str, str] = field(default_factory=dict)
    per_page_type: dict[str, dict[str, str]] = field(default_factory=dict)

    def buckets(self) -> dict[str, dict[str, str]]:
        """全部非空分区（default 在前），键为分区名"""
        result: dict[str, dict[str, str]] = {}
        if self.default:
            result[DEFAULT_BUCKET] = self.default
        for page_type, modules in self.per_page_type.items():
            if modules:
                result[page_type] = modules
        return result

    def is_empty(self) -> bool:
        return not self.default and not any(self.per_page_type.values())


class BundlePartitioner:
    """把每条记录的模块路径归入公共分区或页面专属分区"""

    def partition(self, records: Iterable[UsageRecord]) -> PartitionedModuleSet:
        records = list(records)

        # 每个模块路径出现在多少个不同的页面类型中
        spread: Counter[str] = Counter()
        seen: set[tuple[str, str]] = set()
        page_types: dict[str, None] = {}
        for record in records:
            if record.key in seen:
                continue
            seen.add(record.key)
            spread[record.dependency_path] += 1
            page_types.setdefault(record.page_type, None)

        total_page_types = len(page_types)
        result = PartitionedModuleSet(
            per_page_type={page_type: {} for page_type in page_types}
        )

        for record in records:
            if spread[record.dependency_path] == total_page_types:
                bucket = result.default
            else:
                bucket = result.per_page_type[record.page_type]
            bucket.setdefault(record.dependency_path, record.dependency_name)

        return result
