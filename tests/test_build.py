"""
构建入口测试
"""

import pytest

from api.build import resolve_packages, run
from api.container import AppConfig
from api.services.bundle_service import BundleService, StaticPackage
from api.services.instrumentation import render_script
from jsbundle import DependencyCycleError

PACKAGE = "frontend/Magento/luma/en_US"


class TestResolvePackages:
    """构建包来源优先级"""

    def test_arguments_win(self, monkeypatch):
        monkeypatch.setenv("BUILD_PACKAGES", "adminhtml/Magento/backend/en_US")

        packages = resolve_packages([PACKAGE], AppConfig())

        assert packages == [StaticPackage("frontend", "Magento/luma", "en_US")]

    def test_env_list(self, monkeypatch):
        monkeypatch.setenv("BUILD_PACKAGES", f"{PACKAGE}, adminhtml/Magento/backend/en_US")

        packages = resolve_packages([], AppConfig())

        assert [p.area for p in packages] == ["frontend", "adminhtml"]

    def test_fallback_to_static_package(self, monkeypatch):
        monkeypatch.delenv("BUILD_PACKAGES", raising=False)

        packages = resolve_packages([], AppConfig(static_package="frontend/Vendor/theme/de_DE"))

        assert packages == [StaticPackage("frontend", "Vendor/theme", "de_DE")]


class TestRun:
    """一次完整构建"""

    @pytest.fixture(autouse=True)
    def env(self, monkeypatch, static_root):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        monkeypatch.delenv("BUNDLER_CONFIG", raising=False)
        monkeypatch.delenv("BUILD_PACKAGES", raising=False)
        monkeypatch.setenv("STATIC_DIR", str(static_root))

    @pytest.mark.asyncio
    async def test_flat_build_succeeds(self, write_static, static_root):
        write_static("mage/common.js", "define([], function () {});")

        assert await run([PACKAGE]) == 0
        assert (static_root / PACKAGE / "js/bundle/bundle0.js").exists()

    @pytest.mark.asyncio
    async def test_build_error_exits_non_zero(self, monkeypatch):
        async def failing_build(self, package):
            raise DependencyCycleError(["a", "b", "a"])

        monkeypatch.setattr(BundleService, "build", failing_build)

        assert await run([PACKAGE]) == 1

    @pytest.mark.asyncio
    async def test_missing_bundler_config_raises(self, monkeypatch, static_root):
        monkeypatch.setenv("BUNDLER_CONFIG", str(static_root / "missing.yaml"))

        with pytest.raises(FileNotFoundError):
            await run([PACKAGE])


class TestRenderScript:
    def test_arguments_are_json_encoded(self):
        script = render_script("checkout", "/collect", "js/bundle", settle_delay_ms=10)

        assert script.startswith("(function (route, url, bundleDir, settleDelay)")
        assert script.endswith('("checkout", "/collect", "js/bundle", 10);\n')
