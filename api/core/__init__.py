"""
核心基础设施：日志、请求关联、中间件、异常处理
"""

from api.core.correlation import correlator, generate_request_id
from api.core.exceptions import InvalidRequestError, setup_exception_handlers
from api.core.logging import LogContext, get_logger, setup_logging
from api.core.middleware import setup_middlewares

__all__ = [
    "correlator",
    "generate_request_id",
    "LogContext",
    "get_logger",
    "setup_logging",
    "setup_middlewares",
    "InvalidRequestError",
    "setup_exception_handlers",
]
