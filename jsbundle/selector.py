"""
运行时 bundle 筛选

生产模式下，前台页面只需要加载自身页面类型的 loader 配置，
由该配置声明公共 bundle 与页面 bundle。
"""

from typing import Sequence

from jsbundle.writer import CONFIG_FILE_PREFIX

PRODUCTION_MODE = "production"


class RuntimeBundleSelector:
    """把 bundle 文件列表收窄为当前页面类型的配置文件"""

    def __init__(self, app_mode: str, admin_route: str = "admin"):
        self.app_mode = app_mode
        self.admin_route = admin_route

    def select(self, bundles: Sequence[str], page_type: str) -> list[str]:
        if self.app_mode != PRODUCTION_MODE or page_type == self.admin_route:
            return list(bundles)

        names = (
            f"{CONFIG_FILE_PREFIX}{page_type}.js",
            f"{CONFIG_FILE_PREFIX}{page_type}.min.js",
        )
        for bundle in bundles:
            if bundle.rsplit("/", 1)[-1] in names:
                return [bundle]
        return list(bundles)
