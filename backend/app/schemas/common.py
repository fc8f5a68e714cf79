"""Schema 公共部分"""

from decimal import Decimal
from typing import Any

from pydantic import ValidationInfo

from app.services.balance import coerce_number


def numeric_before(value: Any, info: ValidationInfo) -> Decimal:
    """数值字段预处理：空值为 0，非数字记录警告后按 0 处理"""
    return coerce_number(value, info.field_name)


def optional_numeric_before(value: Any, info: ValidationInfo) -> Any:
    """可选数值字段：未传值保持 None"""
    if value is None:
        return None
    return coerce_number(value, info.field_name)
