"""
页面专属 bundle 的依赖排序

bundle 由具名模块定义拼接而成，模块必须写在它所声明的、同一 bundle 内的
全部依赖之后。bundle 之外的依赖由 loader 自行加载，排序时忽略。
"""

import logging
import re
from typing import Protocol

from jsbundle.exceptions import DependencyCycleError

logger = logging.getLogger(__name__)


class DependencyExtractor(Protocol):
    """从模块源码中提取声明的依赖 ID"""

    def extract(self, content: str) -> list[str]:
        ...


class RegexDependencyExtractor:
    """
    读取第一个 ``define([...], ...)`` 调用的依赖数组

    启发式：只看源码中第一个 define 调用，且只取其数组参数里的字符串字面量
    """

    DEFINE_PATTERN = re.compile(r"define\s*\(\s*\[(.*?)\]", re.DOTALL)
    LITERAL_PATTERN = re.compile(r"""["']([^"']+)["']""")

    def extract(self, content: str) -> list[str]:
        match = self.DEFINE_PATTERN.search(content)
        if not match:
            return []
        return self.LITERAL_PATTERN.findall(match.group(1))


_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


class DependencyOrderer:
    """
    重排 ``module_id -> content``，依赖在前

    除非被依赖关系提前，模块保持原有相对顺序。
    bundle 内模块之间存在循环依赖时抛出 DependencyCycleError。
    """

    def __init__(self, extractor: DependencyExtractor | None = None):
        self.extractor = extractor or RegexDependencyExtractor()

    def dependencies_of(self, module_id: str, contents: dict[str, str]) -> list[str]:
        """模块声明的依赖中属于 ``contents`` 的部分（去重，不含自身）"""
        resolvable = []
        for dependency in self.extractor.extract(contents[module_id]):
            if dependency in contents and dependency != module_id and dependency not in resolvable:
                resolvable.append(dependency)
        return resolvable

    def order(self, contents: dict[str, str]) -> dict[str, str]:
        state = {module_id: _UNVISITED for module_id in contents}
        ordered: dict[str, str] = {}

        for module_id in contents:
            if state[module_id] == _DONE:
                continue
            self._visit(module_id, contents, state, ordered)

        moved = sum(1 for a, b in zip(contents, ordered) if a != b)
        if moved:
            logger.debug(f"Dependency ordering moved {moved} of {len(contents)} modules")
        return ordered

    def _visit(
        self,
        root: str,
        contents: dict[str, str],
        state: dict[str, int],
        ordered: dict[str, str],
    ) -> None:
        # 迭代 DFS，栈元素为 (module_id, 剩余依赖迭代器)
        state[root] = _IN_PROGRESS
        path = [root]
        stack = [(root, iter(self.dependencies_of(root, contents)))]

        while stack:
            module_id, pending = stack[-1]
            dependency = next(pending, None)

            if dependency is None:
                stack.pop()
                path.pop()
                state[module_id] = _DONE
                ordered[module_id] = contents[module_id]
                continue

            if state[dependency] == _DONE:
                continue
            if state[dependency] == _IN_PROGRESS:
                cycle = path[path.index(dependency):] + [dependency]
                raise DependencyCycleError(cycle)

            state[dependency] = _IN_PROGRESS
            path.append(dependency)
            stack.append((dependency, iter(self.dependencies_of(dependency, contents))))
