"""
压缩文件名转换
"""

import re

_MINIFIABLE = re.compile(r"^(?P<name>.+?)(?<!\.min)\.(?P<ext>js)$")


class Minification:
    """启用 JS 压缩时为文件名加上 ``.min`` 标记"""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def add_minified_sign(self, filename: str) -> str:
        if not self.enabled:
            return filename
        match = _MINIFIABLE.match(filename)
        if not match:
            return filename
        return f"{match.group('name')}.min.{match.group('ext')}"
