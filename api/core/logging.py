"""
日志配置

日志行格式：timestamp [level] [cid] [page_type:operation] message

- cid 来自请求关联作用域，作用域外显示为 "*"
- page_type 由采集服务通过 LogContext 注入
- operation 由 LogContext.operation 注入并自动记录耗时

Usage:
    logger = get_logger(__name__)

    with LogContext(page_type="checkout"):
        logger.info("Collecting dependencies")

    with LogContext.operation("bundle", package="frontend/Magento/luma/en_US"):
        logger.info("Writing bundles")
"""

from __future__ import annotations

import contextvars
import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from api.core.correlation import correlator

_fields: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("log_fields", default={})


class LogContext:
    """在作用域内为日志附加字段"""

    def __init__(self, **fields: Any):
        self._fields = fields
        self._token: contextvars.Token | None = None

    def __enter__(self) -> LogContext:
        self._token = _fields.set({**_fields.get(), **self._fields})
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _fields.reset(self._token)
            self._token = None

    @classmethod
    @contextmanager
    def operation(cls, name: str, **fields: Any) -> Iterator[None]:
        """
        计时操作

        正常结束记 info，异常时记 error 并继续抛出。
        """
        logger = get_logger("operation")
        started = time.perf_counter()
        with cls(operation=name, **fields):
            try:
                yield
            except Exception as e:
                logger.error(f"{name} failed after {time.perf_counter() - started:.3f}s: {e}")
                raise
            logger.info(f"{name} completed in {time.perf_counter() - started:.3f}s")


class ContextFormatter(logging.Formatter):
    """把关联 ID 与日志字段渲染为 %(ctx)s"""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created).strftime(datefmt or "%Y-%m-%dT%H:%M:%S.%f")

    def format(self, record: logging.LogRecord) -> str:
        cid = correlator.correlation_id[:11] or "*"
        fields = _fields.get()
        tag = ":".join(str(fields[key]) for key in ("page_type", "operation") if fields.get(key))
        record.ctx = f"[{cid}] [{tag}]" if tag else f"[{cid}]"
        return super().format(record)


_initialized = False


def setup_logging(log_dir: str | None = None, log_level: str = "INFO") -> str | None:
    """
    配置根日志器（只生效一次）

    环境变量：
        LOG_LEVEL: 日志级别
        LOG_DIR: 日志目录，默认 logs
        LOG_TO_FILE: 设为 false 时只输出到控制台

    Returns:
        日志文件路径，未启用文件输出时为 None
    """
    global _initialized
    if _initialized:
        return None

    level = getattr(logging, os.getenv("LOG_LEVEL", log_level).upper(), logging.INFO)
    formatter = ContextFormatter("%(asctime)s [%(levelname)-8s] %(ctx)s %(message)s")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = None
    if os.getenv("LOG_TO_FILE", "true").lower() == "true":
        now = datetime.now()
        log_path = Path(log_dir or os.getenv("LOG_DIR", "logs")) / now.strftime("%Y-%m-%d")
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"{now:%H-%M-%S}.log"
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _initialized = True
    return str(log_file) if log_file else None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
