"""
页面专属 bundle 的内容包装

按模块选择三种策略之一：
- HTML 模板：包装为返回模板字符串的具名模块
- AMD 模块：在 define( 调用中注入模块 ID
- 非 AMD 脚本：在闭包中执行，依赖与导出值取自 shim 配置
"""

import json
import re
from typing import Protocol

from jsbundle.config import BundlerConfig, ShimEntry, apply_rewrites

TEMPLATE_PREFIX = "text!"

_DEFINE_CALL = re.compile(r"define\s*\(")

# 单引号 JS 字符串中必须转义的字符；反斜杠必须最先处理
_JS_STRING_ESCAPES = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ("\r", "\\r"),
    ("\n", "\\n"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


class ShimConfig(Protocol):
    """非 AMD 模块的依赖与导出值查询（只读）"""

    def deps_expression(self, module_id: str) -> str:
        """返回依赖数组的 JS 表达式"""
        ...

    def export_expression(self, module_id: str) -> str:
        """返回导出值的 JS 表达式"""
        ...


class RuntimeShimConfig:
    """在浏览器中读取 loader 的 shim 配置"""

    def __init__(self, config_expression: str = "require.s.contexts._.config.shim"):
        self.config_expression = config_expression

    def _entry(self, module_id: str) -> str:
        return f"{self.config_expression}['{module_id}']"

    def deps_expression(self, module_id: str) -> str:
        entry = self._entry(module_id)
        return f"({entry} && {entry}.deps || [])"

    def export_expression(self, module_id: str) -> str:
        entry = self._entry(module_id)
        return f"({entry} && {entry}.exportsFn && {entry}.exportsFn())"


class StaticShimConfig:
    """构建时已知的 shim 配置，未配置的模块交给 fallback"""

    def __init__(self, entries: dict[str, ShimEntry], fallback: ShimConfig | None = None):
        self.entries = entries
        self.fallback = fallback or RuntimeShimConfig()

    def deps_expression(self, module_id: str) -> str:
        entry = self.entries.get(module_id)
        if entry is None:
            return self.fallback.deps_expression(module_id)
        return json.dumps(entry.deps)

    def export_expression(self, module_id: str) -> str:
        entry = self.entries.get(module_id)
        if entry is None:
            return self.fallback.export_expression(module_id)
        if not entry.exports:
            return "undefined"
        return f"window.{entry.exports}"


def is_template(module_id: str) -> bool:
    return module_id.lower().startswith(TEMPLATE_PREFIX)


def is_amd(content: str) -> bool:
    return _DEFINE_CALL.search(content) is not None


def escape_content(content: str) -> str:
    """转义为单引号 JS 字符串字面量的内容"""
    for char, escaped in _JS_STRING_ESCAPES:
        content = content.replace(char, escaped)
    return content


class ContentWrapper:
    """
    单个模块的包装器

    Usage:
        ```python
        wrapper = ContentWrapper(config)
        wrapper.wrap("Magento_Ui/js/core/app", "define(['jquery'], function ($) {});")
        # define('Magento_Ui/js/core/app',['jquery'], function ($) {});
        ```
    """

    def __init__(self, config: BundlerConfig, shim: ShimConfig | None = None):
        self.config = config
        if shim is None:
            shim = StaticShimConfig(config.shim) if config.shim else RuntimeShimConfig()
        self.shim = shim

    def module_id(self, module_id: str) -> str:
        """模块写入 bundle 时使用的 ID"""
        if is_template(module_id):
            return apply_rewrites(module_id, self.config.template_id_rewrites)
        return module_id

    def wrap(self, module_id: str, content: str) -> str:
        if is_template(module_id):
            return self.wrap_template(module_id, content)
        if is_amd(content):
            return self.wrap_amd(module_id, content)
        return self.wrap_legacy(module_id, content)

    def wrap_template(self, module_id: str, content: str) -> str:
        return (
            f"define('{self.module_id(module_id)}', function() "
            f"{{return '{escape_content(content)}';}});"
        )

    def wrap_amd(self, module_id: str, content: str) -> str:
        if module_id in self.config.unwrapped_modules:
            return content
        return _DEFINE_CALL.sub(lambda _: f"define('{module_id}',", content, count=1)

    def wrap_legacy(self, module_id: str, content: str) -> str:
        deps = self.shim.deps_expression(module_id)
        export = self.shim.export_expression(module_id)
        return (
            f"define('{module_id}', {deps}, function() {{\n"
            f"    {content}\n"
            f"    return {export};\n"
            f"}}.bind(window));"
        )
