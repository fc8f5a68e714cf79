"""记录写入相关异常（由接口层转换为 HTTP 错误）"""

from typing import Any, Dict, Optional


class RecordError(Exception):
    """记录操作异常基类"""

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


class RecordNotFoundError(RecordError):
    """记录不存在"""


class RecordValidationError(RecordError):
    """数据不满足业务规则"""


class RecordWriteError(RecordError):
    """数据库拒绝写入"""
