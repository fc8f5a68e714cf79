"""
结余计算

各模块的期末/在库数值都由本模块计算：
- 套件:   期初余额 + 入库 - 出库
- 游戏:   上期库存 + 新增 - 发出
- 西装:   该性别尺码全部历史 (added - sent) 的累计
- 日常支出: 固定额度 + 上月结余 - 支出

所有数值统一为 Decimal，缺失值按 0 处理，无法转换的值按 0 处理并记录警告。
"""

import math
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

from app.core.logging_config import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")


class CategoryType(str, Enum):
    """结转类别"""
    KIT = "kit"
    GAME = "game"
    BLAZER = "blazer"
    EXPENSE = "expense"

    @property
    def table_name(self) -> str:
        return _TABLE_NAMES[self]


_TABLE_NAMES = {
    CategoryType.KIT: "kits_inventory",
    CategoryType.GAME: "games_inventory",
    CategoryType.BLAZER: "blazer_inventory",
    CategoryType.EXPENSE: "daily_expenses",
}


def coerce_number(value: Any, field: Optional[str] = None) -> Decimal:
    """转换为 Decimal

    None / 空字符串视为 0；非数值（含 NaN、Infinity、布尔值）记录警告后按 0 处理。
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        logger.warning(f"字段 {field or '?'} 收到布尔值 {value!r}，按 0 处理")
        return ZERO
    if isinstance(value, Decimal):
        if value.is_finite():
            return value
        logger.warning(f"字段 {field or '?'} 数值无效 {value!r}，按 0 处理")
        return ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if math.isfinite(value):
            return Decimal(str(value))
        logger.warning(f"字段 {field or '?'} 数值无效 {value!r}，按 0 处理")
        return ZERO
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            number = Decimal(text)
        except InvalidOperation:
            logger.warning(f"字段 {field or '?'} 无法解析为数字: {value!r}，按 0 处理")
            return ZERO
        if not number.is_finite():
            logger.warning(f"字段 {field or '?'} 数值无效 {value!r}，按 0 处理")
            return ZERO
        return number

    logger.warning(f"字段 {field or '?'} 类型不支持 {type(value).__name__}，按 0 处理")
    return ZERO


def compute_closing(category_type: CategoryType, opening: Any, addition: Any, removal: Any) -> Decimal:
    """计算单条记录的期末值

    参数按类别对应：
    - kit:     opening_balance, addins, takeouts
    - game:    previous_stock, adding, sent
    - blazer:  上一条累计在库, added, sent
    - expense: previous_month_overspend, fixed_amount, expenses
    """
    CategoryType(category_type)  # 校验类别
    opening = coerce_number(opening, "opening")
    addition = coerce_number(addition, "addition")
    removal = coerce_number(removal, "removal")
    return opening + addition - removal


def compute_blazer_stock(history: Iterable[Any]) -> Decimal:
    """西装在库 = 全部历史记录 (added - sent) 之和"""
    total = ZERO
    for record in history:
        total = compute_closing(
            CategoryType.BLAZER, total,
            _read(record, "added"), _read(record, "sent"),
        )
    return total


def split_signed_quantity(quantity: Any) -> Tuple[Decimal, Decimal, Decimal]:
    """带符号数量拆分为 (quantity, added, sent)"""
    quantity = coerce_number(quantity, "quantity")
    if quantity > 0:
        return quantity, quantity, ZERO
    if quantity < 0:
        return quantity, ZERO, -quantity
    return ZERO, ZERO, ZERO


def _read(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)
