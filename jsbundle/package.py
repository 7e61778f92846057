"""
把已部署的 area/theme/locale 静态资源包交给 bundle 写出器
"""

import logging
from pathlib import PurePosixPath

from jsbundle.filesystem import StaticDirectory
from jsbundle.writer import RequireJsBundle

logger = logging.getLogger(__name__)

BUNDLABLE_TYPES = ("js", "html")


def package_files(static_dir: StaticDirectory, package_path: str, bundle_dir: str) -> list[tuple[str, str, str]]:
    """
    列出静态资源包中可打包的文件

    Returns:
        (file_path, source_path, content_type) 列表；file_path 相对于资源包，
        source_path 相对于静态资源根目录
    """
    prefix = package_path.rstrip("/") + "/"
    relative = [
        path[len(prefix):]
        for path in static_dir.list_files(package_path)
        if path.startswith(prefix)
    ]
    available = set(relative)

    files = []
    for file_path in relative:
        if file_path.startswith(bundle_dir.rstrip("/") + "/"):
            continue
        content_type = PurePosixPath(file_path).suffix.lstrip(".")
        if content_type not in BUNDLABLE_TYPES:
            continue
        # 同名的 .min.js 由 Minification 负责读取
        if file_path.endswith(".min.js") and file_path[: -len(".min.js")] + ".js" in available:
            continue
        files.append((file_path, prefix + file_path, content_type))
    return files


def bundle_package(bundle: RequireJsBundle) -> list[str]:
    """重建一个静态资源包的 bundle"""
    package_path = f"{bundle.area}/{bundle.theme}/{bundle.locale}"
    bundle.clear()

    accepted = 0
    files = package_files(bundle.static_dir, package_path, bundle.config.bundle_dir)
    for file_path, source_path, content_type in files:
        if bundle.add_file(file_path, source_path, content_type):
            accepted += 1

    mode = "page-specific" if bundle.page_specific else "flat"
    logger.info(f"Bundling {package_path} ({mode}): {accepted}/{len(files)} files accepted")
    return bundle.flush()
