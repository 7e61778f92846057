"""
请求关联 ID

每个 HTTP 请求（或一次构建）在一个关联作用域内执行，日志行据此归属到请求。
"""

import contextvars
from contextlib import contextmanager
from typing import Iterator

import nanoid

# 数字 + 大小写字母
_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_SIZE = 10

_current: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")


def generate_request_id() -> str:
    return nanoid.generate(alphabet=_ALPHABET, size=_SIZE)


class Correlator:
    """关联 ID 作用域，嵌套时以 "::" 拼接"""

    @contextmanager
    def scope(self, scope_id: str) -> Iterator[str]:
        parent = _current.get()
        value = f"{parent}::{scope_id}" if parent else scope_id
        token = _current.set(value)
        try:
            yield value
        finally:
            _current.reset(token)

    @property
    def correlation_id(self) -> str:
        return _current.get()


correlator = Correlator()
