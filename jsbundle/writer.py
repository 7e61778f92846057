"""
RequireJS bundle 写出

两种模式：
- 平铺：按内容池分组，依次追加到编号的 bundle 文件，超出尺寸上限时换新文件。
  用于 admin 区域以及尚无采集数据的情况。
- 页面专属：每个分区一个 bundle（公共 "default" 加每个页面类型一个），
  按依赖排序并包装为具名模块；另为每个页面类型写出一个 loader 配置文件，
  声明各 bundle 包含的模块 ID。
"""

import json
import logging
from dataclasses import dataclass, field

from jsbundle.config import BundlerConfig, apply_rewrites
from jsbundle.exceptions import MissingModuleContentError
from jsbundle.filesystem import FileWriter, StaticDirectory
from jsbundle.minification import Minification
from jsbundle.ordering import DependencyOrderer
from jsbundle.partitioner import DEFAULT_BUCKET, PartitionedModuleSet
from jsbundle.wrapping import ContentWrapper

logger = logging.getLogger(__name__)

CONFIG_FILE_PREFIX = "requirejs-config-"

INIT_JS = (
    "require.config({\n"
    "    bundles: {\n"
    "        'mage/requirejs/static': [\n"
    "            'jsbuild',\n"
    "            'buildTools',\n"
    "            'text',\n"
    "            'statistician'\n"
    "        ]\n"
    "    },\n"
    "    deps: [\n"
    "        'jsbuild'\n"
    "    ]\n"
    "});\n"
)


@dataclass
class BundleRegistryEntry:
    """逻辑 bundle 名及其定义的模块 ID（按写入顺序）"""

    bundle_name: str
    module_ids: list[str] = field(default_factory=list)

    def render(self) -> str:
        ids = "','".join(self.module_ids)
        return f"'{self.bundle_name}':['{ids}']"


@dataclass
class _PageFile:
    module_id: str
    source_path: str


class RequireJsBundle:
    """
    单个 area/theme/locale 静态资源包的 bundle 写出器

    Usage:
        ```python
        bundle = RequireJsBundle(static_dir, config, "frontend", "Magento/luma", "en_US",
                                 partition=BundlePartitioner().partition(records))
        bundle.add_file("mage/common.js", "frontend/Magento/luma/en_US/mage/common.js", "js")
        bundle.flush()
        ```
    """

    def __init__(
        self,
        static_dir: StaticDirectory,
        config: BundlerConfig,
        area: str,
        theme: str,
        locale: str,
        partition: PartitionedModuleSet | None = None,
        minification: Minification | None = None,
        wrapper: ContentWrapper | None = None,
        orderer: DependencyOrderer | None = None,
    ):
        self.static_dir = static_dir
        self.config = config
        self.area = area
        self.theme = theme
        self.locale = locale
        self.partition = partition or PartitionedModuleSet()
        self.minification = minification or Minification(config.minify_js)
        self.wrapper = wrapper or ContentWrapper(config)
        self.orderer = orderer or DependencyOrderer()

        self.path_to_bundle_dir = f"{area}/{theme}/{locale}/{config.bundle_dir}"
        self.registry: dict[str, BundleRegistryEntry] = {}

        self._pool_files: dict[str, dict[str, str]] = {}
        self._page_files: dict[str, dict[str, _PageFile]] = {}
        self._file_content: dict[str, str] = {}
        self._bundle_file_index = 0
        self._current_file: FileWriter | None = None
        self._reset_files()

    @property
    def page_specific(self) -> bool:
        """是否按采集数据生成页面专属 bundle"""
        return not self.config.is_admin_area(self.area) and not self.partition.is_empty()

    def _reset_files(self) -> None:
        self._pool_files = {pool: {} for pool in self.config.content_pools.values()}
        self._page_files = {bucket: {} for bucket in self.partition.buckets()}

    # =========================================================================
    # 文件登记
    # =========================================================================

    def add_file(self, file_path: str, source_path: str, content_type: str) -> bool:
        """
        登记一个已部署文件

        页面专属模式下文件不属于任何分区时返回 False
        """
        if not self.page_specific:
            pool = self.config.pool_for(content_type)
            self._pool_files.setdefault(pool, {})[file_path] = source_path
            return True

        dependency_path = apply_rewrites(file_path, self.config.source_rewrites)
        added = False
        for bucket, modules in self.partition.buckets().items():
            if dependency_path in modules:
                self._page_files[bucket][file_path] = _PageFile(modules[dependency_path], source_path)
                added = True
        return added

    # =========================================================================
    # 写出
    # =========================================================================

    def flush(self) -> list[str]:
        """
        写出全部 bundle 文件，返回写出的路径

        出错时丢弃未完成的文件，目标路径不留下半写的 bundle
        """
        try:
            if self.page_specific:
                return self.flush_page_specific()
            return self.flush_flat()
        finally:
            self._discard_current_file()
            self._reset_files()

    def flush_flat(self) -> list[str]:
        written: list[str] = []
        self._bundle_file_index = 0
        max_size = self.config.max_size_for(self.area, self.theme)

        for pool, files in self._pool_files.items():
            if not files:
                continue
            content: dict[str, str] = {}
            free_space = float(max_size)
            written.append(self._start_new_bundle_file(pool))
            for file_path, source_path in files.items():
                file_content = self._get_file_content(source_path)
                size = len(file_content.encode("utf-8")) / 1024
                if content and free_space <= size:
                    self._end_bundle_file(content)
                    written.append(self._start_new_bundle_file(pool))
                    free_space = float(max_size)
                    content = {}
                free_space -= size
                content[self.minification.add_minified_sign(file_path)] = file_content
            self._end_bundle_file(content)

        if self._current_file is not None:
            self._current_file.write(INIT_JS)
            self._close_current_file()

        logger.info(f"Flat bundles written: {len(written)} file(s) in {self.path_to_bundle_dir}")
        return written

    def flush_page_specific(self) -> list[str]:
        written: list[str] = []
        self.registry = {}

        for bucket, files in self._page_files.items():
            if not files:
                continue
            contents: dict[str, str] = {}
            for page_file in files.values():
                contents[page_file.module_id] = self._get_file_content(page_file.source_path)

            ordered = self.orderer.order(contents)
            path = self.minification.add_minified_sign(f"{self.path_to_bundle_dir}/{bucket}.js")
            bundle_file = self.static_dir.open_file(path)
            module_ids = []
            try:
                for module_id, content in ordered.items():
                    module_ids.append(self.wrapper.module_id(module_id))
                    bundle_file.write(self.wrapper.wrap(module_id, content) + "\n")
            except Exception:
                bundle_file.discard()
                raise
            bundle_file.close()

            self.registry[bucket] = BundleRegistryEntry(
                bundle_name=f"{self.config.bundle_dir}/{bucket}",
                module_ids=module_ids,
            )
            written.append(path)
            logger.debug(f"Page bundle {bucket}: {len(module_ids)} modules")

        written.extend(self.write_config_bundle_files())
        logger.info(
            f"Page-specific bundles written: {len(self.registry)} bundle(s) "
            f"in {self.path_to_bundle_dir}"
        )
        return written

    def write_config_bundle_files(self) -> list[str]:
        """每个页面类型一个 loader 配置：公共 bundle 条目加自身条目"""
        written = []
        default_entry = self.registry.get(DEFAULT_BUCKET)
        for bucket, entry in self.registry.items():
            if bucket == DEFAULT_BUCKET or not entry.module_ids:
                continue
            entries = [default_entry.render()] if default_entry else []
            entries.append(entry.render())
            path = self.minification.add_minified_sign(
                f"{self.path_to_bundle_dir}/{CONFIG_FILE_PREFIX}{bucket}.js"
            )
            config_file = self.static_dir.open_file(path)
            try:
                config_file.write("requirejs.config({bundles:{" + ",".join(entries) + "}});")
            except Exception:
                config_file.discard()
                raise
            config_file.close()
            written.append(path)
        return written

    def clear(self) -> bool:
        """删除静态资源包的 bundle 目录"""
        return self.static_dir.delete(self.path_to_bundle_dir)

    # =========================================================================
    # 内部方法
    # =========================================================================

    def _start_new_bundle_file(self, pool: str) -> str:
        self._close_current_file()
        path = self.minification.add_minified_sign(
            f"{self.path_to_bundle_dir}/bundle{self._bundle_file_index}.js"
        )
        self._current_file = self.static_dir.open_file(path)
        self._current_file.write('require.config({"config": {\n')
        self._current_file.write(f'        "{pool}":')
        self._bundle_file_index += 1
        return path

    def _end_bundle_file(self, contents: dict[str, str]) -> None:
        if contents:
            encoded = json.dumps(contents, separators=(",", ":"))
            self._current_file.write(f"{encoded}\n")
        else:
            self._current_file.write("{}\n")
        self._current_file.write("}});\n")

    def _close_current_file(self) -> None:
        if self._current_file is not None:
            self._current_file.close()
            self._current_file = None

    def _discard_current_file(self) -> None:
        if self._current_file is not None:
            self._current_file.discard()
            self._current_file = None

    def _get_file_content(self, source_path: str) -> str:
        if source_path not in self._file_content:
            try:
                raw = self.static_dir.read_file(self.minification.add_minified_sign(source_path))
            except OSError as e:
                raise MissingModuleContentError(source_path, str(e)) from e
            try:
                content = raw.decode("utf-8")
            except UnicodeDecodeError:
                content = raw.decode("latin-1")
            self._file_content[source_path] = content
        return self._file_content[source_path]
