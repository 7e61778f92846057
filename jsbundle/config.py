"""
配置管理模块

支持从 YAML 配置文件、环境变量加载打包配置
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class ShimEntry(BaseModel):
    """非 AMD 脚本的 shim 描述"""

    deps: list[str] = Field(default_factory=list)
    exports: str | None = Field(default=None, description="全局导出变量名")


class BundlerConfig(BaseModel):
    """打包配置"""

    # 打包输出目录（同时作为采集时的“已打包”标记）
    bundle_dir: str = Field(default="js/bundle")

    # 单个 bundle 文件最大尺寸（KB），按 "<area>/<theme>" 或 "<area>" 覆盖
    default_max_size_kb: int = Field(default=1024)
    max_size_kb: dict[str, int] = Field(default_factory=dict)

    # 内容类型 -> 内容池
    content_pools: dict[str, str] = Field(
        default_factory=lambda: {"js": "jsbuild", "html": "text"}
    )
    fallback_pool: str = Field(default="text")

    # 采集路径改写规则（按顺序执行）
    path_rewrites: list[tuple[str, str]] = Field(
        default_factory=lambda: [
            (".min.js", ".js"),
            ("jquery/jquery.storageapi", "jquery/jquery.storageapi.min"),
            ("ui/template", "Magento_Ui/templates"),
        ]
    )
    # 部署文件路径改写规则（文件进入 bundle 时）
    source_rewrites: list[tuple[str, str]] = Field(
        default_factory=lambda: [
            (".min.", "."),
            ("jquery/jquery.storageapi", "jquery/jquery.storageapi.min"),
        ]
    )
    # 命中别名后的替换（text 插件 shim）
    alias_rewrites: dict[str, str] = Field(
        default_factory=lambda: {"text": "mage/requirejs/text"}
    )
    # 未命中别名时对模块 ID 的修正
    id_fixups: list[tuple[str, str]] = Field(
        default_factory=lambda: [("jquery/ui-modules", "jquery-ui-modules")]
    )
    # 模板模块 ID 写入 bundle 时的改写
    template_id_rewrites: list[tuple[str, str]] = Field(
        default_factory=lambda: [("Magento_Ui/templates", "ui/template")]
    )

    # 保持匿名定义的全局模块
    unwrapped_modules: list[str] = Field(default_factory=lambda: ["jquery", "underscore"])

    admin_areas: list[str] = Field(default_factory=lambda: ["adminhtml", "admin"])
    admin_route: str = Field(default="admin")

    minify_js: bool = Field(default=False)

    # 静态 shim 配置（为空时使用运行时 shim 查询）
    shim: dict[str, ShimEntry] = Field(default_factory=dict)

    def max_size_for(self, area: str, theme: str) -> int:
        """获取指定 area/theme 的 bundle 最大尺寸（KB）"""
        for key in (f"{area}/{theme}", area):
            if key in self.max_size_kb:
                return self.max_size_kb[key]
        return self.default_max_size_kb

    def pool_for(self, content_type: str) -> str:
        """内容类型对应的内容池，未知类型归入 fallback_pool"""
        return self.content_pools.get(content_type, self.fallback_pool)

    def is_admin_area(self, area: str) -> bool:
        return area in self.admin_areas


def apply_rewrites(value: str, rewrites: list[tuple[str, str]]) -> str:
    """按顺序执行子串替换，每一步作用于上一步的结果"""
    for search, replace in rewrites:
        value = value.replace(search, replace)
    return value


def load_config(
    config_file: str | Path | None = None,
    env_file: str | Path | None = None,
) -> BundlerConfig:
    """
    加载打包配置

    优先级：
    1. 环境变量（BUNDLER_MINIFY_JS, BUNDLER_MAX_SIZE_KB）
    2. YAML 配置文件（参数或 BUNDLER_CONFIG 环境变量）
    3. 默认值

    Args:
        config_file: YAML 配置文件路径
        env_file: .env 文件路径，默认为当前目录的 .env

    Returns:
        BundlerConfig: 打包配置对象

    Example:
        ```python
        from jsbundle.config import load_config

        config = load_config("bundler.yaml")
        print(config.max_size_for("frontend", "Magento/luma"))
        ```
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    if Path(env_file).exists():
        load_dotenv(env_file)

    config_file = config_file or os.getenv("BUNDLER_CONFIG")
    data: dict[str, Any] = {}
    if config_file:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Bundler config must be a mapping: {config_file}")

    # 额外的内容池合并到默认内容池之上
    if "content_pools" in data:
        default_pools = BundlerConfig.model_fields["content_pools"].default_factory()
        data["content_pools"] = {**default_pools, **(data["content_pools"] or {})}

    if os.getenv("BUNDLER_MINIFY_JS"):
        data["minify_js"] = os.getenv("BUNDLER_MINIFY_JS", "").lower() == "true"
    if os.getenv("BUNDLER_MAX_SIZE_KB"):
        data["default_max_size_kb"] = int(os.getenv("BUNDLER_MAX_SIZE_KB", "1024"))

    return BundlerConfig(**data)
