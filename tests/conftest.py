"""
测试公共 fixtures
"""

import os

import pytest

from api.container import AppContext
from jsbundle import BundlerConfig, LocalStaticDirectory, UsageRecord

PACKAGE = "frontend/Magento/luma/en_US"

# 测试期间只输出到控制台
os.environ.setdefault("LOG_TO_FILE", "false")


@pytest.fixture
def bundler_config():
    """默认打包配置"""
    return BundlerConfig()


@pytest.fixture
def static_root(tmp_path):
    """静态资源根目录"""
    root = tmp_path / "static"
    root.mkdir()
    return root


@pytest.fixture
def static_dir(static_root):
    return LocalStaticDirectory(static_root)


@pytest.fixture
def write_static(static_root):
    """在静态资源包内写入文件"""

    def _write(relative: str, content: str | bytes, package: str = PACKAGE):
        target = static_root / package / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        return f"{package}/{relative}"

    return _write


@pytest.fixture
def record():
    """UsageRecord 工厂"""

    def _record(page_type: str, path: str, name: str | None = None) -> UsageRecord:
        if name is None:
            name = path[: -len(".js")] if path.endswith(".js") else f"text!{path}"
        return UsageRecord(page_type=page_type, dependency_name=name, dependency_path=path)

    return _record


@pytest.fixture(autouse=True)
def reset_app_context():
    """每个测试前后重置 AppContext 单例"""
    AppContext.reset()
    yield
    AppContext.reset()
