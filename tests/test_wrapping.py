"""
ContentWrapper 单元测试
"""

import pytest

from jsbundle import BundlerConfig, ContentWrapper, RuntimeShimConfig, StaticShimConfig
from jsbundle.config import ShimEntry
from jsbundle.wrapping import escape_content


class TestContentWrapper:
    """三种包装策略"""

    def test_amd_module_gets_id_injected(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)
        content = "define(['jquery'], function ($) { return {}; });"

        wrapped = wrapper.wrap("Magento_Ui/js/core/app", content)

        assert wrapped == "define('Magento_Ui/js/core/app',['jquery'], function ($) { return {}; });"

    def test_only_first_define_call_is_rewritten(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)
        content = "define(function () {});\n// define( again"

        wrapped = wrapper.wrap("a", content)

        assert wrapped.startswith("define('a',function () {});")
        assert wrapped.endswith("// define( again")

    def test_define_with_whitespace(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)

        assert wrapper.wrap("a", "define ( function () {});") == "define('a', function () {});"

    def test_exempt_global_modules_pass_through(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)
        content = "(function (factory) { define([], factory); })(function () {});"

        assert wrapper.wrap("jquery", content) == content
        assert wrapper.wrap("underscore", content) == content

    def test_template_becomes_string_module(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)
        content = "<div class='field'>\n<span>x</span></div>"

        wrapped = wrapper.wrap("text!Magento_Ui/templates/form/field.html", content)

        assert wrapped == (
            "define('text!ui/template/form/field.html', function() "
            "{return '<div class=\\'field\\'>\\n<span>x</span></div>';});"
        )

    def test_template_backslash_is_escaped_first(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)

        wrapped = wrapper.wrap("text!a.html", "<p>C:\\new</p>")

        assert wrapped == "define('text!a.html', function() {return '<p>C:\\\\new</p>';});"

    def test_template_escaped_quote(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)

        wrapped = wrapper.wrap("text!a.html", "<b>it\\'s</b>")

        assert wrapped == "define('text!a.html', function() {return '<b>it\\\\\\'s</b>';});"

    def test_template_crlf_and_line_separators(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)

        wrapped = wrapper.wrap("text!a.html", "<p>a\r\nb\u2028c\u2029</p>")

        assert wrapped == (
            "define('text!a.html', function() {return '<p>a\\r\\nb\\u2028c\\u2029</p>';});"
        )
        assert "\r" not in wrapped and "\n" not in wrapped

    def test_template_id_rewrite(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)

        assert wrapper.module_id("text!Magento_Ui/templates/grid.html") == "text!ui/template/grid.html"
        assert wrapper.module_id("Magento_Ui/templates/grid") == "Magento_Ui/templates/grid"

    def test_legacy_script_uses_runtime_shim(self, bundler_config):
        wrapper = ContentWrapper(bundler_config)

        wrapped = wrapper.wrap("legacy/lib", "window.lib = {};")

        shim = "require.s.contexts._.config.shim['legacy/lib']"
        assert wrapped.startswith(f"define('legacy/lib', ({shim} && {shim}.deps || []), function() {{\n")
        assert "    window.lib = {};\n" in wrapped
        assert f"return ({shim} && {shim}.exportsFn && {shim}.exportsFn());" in wrapped
        assert wrapped.endswith("}.bind(window));")

    def test_legacy_script_uses_static_shim(self):
        config = BundlerConfig(shim={"legacy/lib": ShimEntry(deps=["jquery"], exports="Lib")})
        wrapper = ContentWrapper(config)

        wrapped = wrapper.wrap("legacy/lib", "window.Lib = {};")

        assert wrapped.startswith("define('legacy/lib', [\"jquery\"], function() {")
        assert "return window.Lib;" in wrapped


class TestStaticShimConfig:
    """静态 shim 查询"""

    def test_unknown_module_falls_back(self):
        shim = StaticShimConfig({}, fallback=RuntimeShimConfig("cfg"))

        assert shim.deps_expression("x") == "(cfg['x'] && cfg['x'].deps || [])"

    def test_entry_without_exports(self):
        shim = StaticShimConfig({"x": ShimEntry(deps=[])})

        assert shim.deps_expression("x") == "[]"
        assert shim.export_expression("x") == "undefined"


class TestEscapeContent:
    """单引号字符串字面量转义"""

    @pytest.mark.parametrize(
        "content, expected",
        [
            ("it's", "it\\'s"),
            ("a\\b", "a\\\\b"),
            ("a\\'b", "a\\\\\\'b"),
            ("line1\r\nline2", "line1\\r\\nline2"),
        ],
    )
    def test_escape(self, content, expected):
        assert escape_content(content) == expected
