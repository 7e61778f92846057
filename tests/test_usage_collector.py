"""
UsageCollector 单元测试
"""

import pytest

from api.models import DependencyReport
from api.services.repositories import UsageRecordRepository
from api.services.usage_collector import UsageCollector
from jsbundle import BundlerConfig, UsageRecord


@pytest.fixture
def repository():
    return UsageRecordRepository(None)


@pytest.fixture
def collector(repository):
    return UsageCollector(repository, BundlerConfig())


class TestModuleId:
    """路径规范化与模块 ID 推导"""

    def test_template_id(self, collector):
        assert collector.module_id("Magento_Ui/templates/form/field.html", {}) == (
            "text!Magento_Ui/templates/form/field.html"
        )

    def test_alias_match(self, collector):
        paths = {"jquery/ui": "jquery/jquery-ui"}

        assert collector.module_id("jquery/jquery-ui.js", paths) == "jquery/ui"

    def test_array_path_targets_are_ignored(self, collector):
        paths = {"jquery": ["//cdn.example.com/jquery", "jquery"], "jquery/ui": "jquery/jquery-ui"}

        assert collector.module_id("jquery.js", paths) == "jquery"
        assert collector.module_id("jquery/jquery-ui.js", paths) == "jquery/ui"

    def test_text_plugin_alias_is_substituted(self, collector):
        paths = {"text": "mage/requirejs/text"}

        assert collector.module_id("mage/requirejs/text.js", paths) == "mage/requirejs/text"

    def test_fallback_with_id_fixup(self, collector):
        assert collector.module_id("jquery/ui-modules/widget.js", {}) == "jquery-ui-modules/widget"
        assert collector.module_id("mage/common.js", {}) == "mage/common"

    def test_other_extensions_have_no_id(self, collector):
        assert collector.module_id("css/styles.css", {}) is None

    def test_normalize_path(self, collector):
        assert collector.normalize_path("mage/common.min.js") == "mage/common.js"
        assert collector.normalize_path("jquery/jquery.storageapi.min.js") == (
            "jquery/jquery.storageapi.min.js"
        )
        assert collector.normalize_path("ui/template/form/field.html") == (
            "Magento_Ui/templates/form/field.html"
        )

    def test_is_collectable(self, collector):
        assert collector.is_collectable("mage/common.js")
        assert not collector.is_collectable("js/bundle/bundle0.js")
        assert not collector.is_collectable("https://cdn.example.com/lib.js")
        assert not collector.is_collectable("//cdn.example.com/lib.js")


class TestCollect:
    """上报处理"""

    @pytest.mark.asyncio
    async def test_collect_stores_records(self, collector, repository):
        report = DependencyReport(
            route="checkout",
            deps=[
                "mage/common.min.js",
                "ui/template/form/field.html",
                "js/bundle/default.js",
                "https://cdn.example.com/lib.js",
                "css/styles.css",
            ],
            paths={},
        )

        stats = await collector.collect(report)

        assert stats.received == 5
        assert stats.stored == 2
        assert stats.skipped == 3
        assert await repository.records() == [
            UsageRecord("checkout", "mage/common", "mage/common.js"),
            UsageRecord(
                "checkout",
                "text!Magento_Ui/templates/form/field.html",
                "Magento_Ui/templates/form/field.html",
            ),
        ]

    @pytest.mark.asyncio
    async def test_repeated_report_is_absorbed(self, collector, repository):
        report = DependencyReport(route="checkout", deps=["mage/common.js"], paths={})

        await collector.collect(report)
        stats = await collector.collect(report)

        assert stats.duplicates == 1
        assert await repository.count() == 1
