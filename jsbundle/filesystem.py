"""
静态资源目录抽象

打包只需要读取已部署文件、写出 bundle 文件、删除 bundle 目录。
bundle 文件在 close() 时原子地出现在目标路径；discard() 则丢弃已写内容。
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Protocol

from jsbundle.exceptions import BundleWriteError

logger = logging.getLogger(__name__)


class FileWriter(Protocol):
    """打开中的 bundle 文件"""

    def write(self, data: str) -> None:
        ...

    def close(self) -> None:
        """提交已写内容"""
        ...

    def discard(self) -> None:
        """放弃已写内容，目标路径保持不变"""
        ...


class StaticDirectory(Protocol):
    """静态资源目录的读写接口"""

    def open_file(self, path: str) -> FileWriter:
        ...

    def read_file(self, path: str) -> bytes:
        ...

    def delete(self, path: str) -> bool:
        ...

    def list_files(self, path: str) -> list[str]:
        ...


class LocalFileWriter:
    """写入同目录下的临时文件，close() 时重命名到目标路径"""

    def __init__(self, target: Path, relative_path: str):
        self._target = target
        self._relative_path = relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
            self._tmp = Path(tmp_name)
            self._file = os.fdopen(fd, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise BundleWriteError(relative_path, str(e)) from e
        self.closed = False

    def write(self, data: str) -> None:
        try:
            self._file.write(data)
        except OSError as e:
            raise BundleWriteError(self._relative_path, str(e)) from e

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._file.close()
            os.replace(self._tmp, self._target)
        except OSError as e:
            self._tmp.unlink(missing_ok=True)
            raise BundleWriteError(self._relative_path, str(e)) from e

    def discard(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._file.close()
        finally:
            self._tmp.unlink(missing_ok=True)
        logger.debug(f"Discarded {self._relative_path}")

    def __enter__(self) -> "LocalFileWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()


class LocalStaticDirectory:
    """
    本地磁盘上的静态资源目录

    Usage:
        ```python
        static_dir = LocalStaticDirectory("pub/static")
        with static_dir.open_file("frontend/Magento/luma/en_US/js/bundle/bundle0.js") as f:
            f.write("...")
        ```
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def open_file(self, path: str) -> LocalFileWriter:
        return LocalFileWriter(self._resolve(path), path)

    def read_file(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def delete(self, path: str) -> bool:
        target = self._resolve(path)
        try:
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
        except OSError as e:
            raise BundleWriteError(path, str(e)) from e
        logger.debug(f"Deleted {path}")
        return True

    def list_files(self, path: str) -> list[str]:
        """path 下所有文件的相对路径（已排序，跳过临时文件）"""
        base = self._resolve(path)
        if not base.is_dir():
            return []
        return sorted(p.relative_to(self.root).as_posix() for p in self._walk(base))

    @staticmethod
    def _walk(base: Path) -> Iterator[Path]:
        for p in base.rglob("*"):
            if p.is_file() and not p.name.startswith("."):
                yield p
