"""
构建错误

打包过程不捕获这些异常，构建失败时不得留下看似可用的输出。
"""


class BundleBuildError(Exception):
    """打包致命错误基类"""


class MissingModuleContentError(BundleBuildError):
    """无法读取模块源码"""

    def __init__(self, source_path: str, reason: str = ""):
        self.source_path = source_path
        message = f"Cannot read module content: {source_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DependencyCycleError(BundleBuildError):
    """模块声明的依赖存在循环"""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__("Dependency cycle: " + " -> ".join(cycle))


class BundleWriteError(BundleBuildError):
    """静态资源目录写入或删除失败"""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Cannot write bundle file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
