"""
结转类别定义

每个 CategoryType 对应一个 CategoryVariant，描述：
- 结转维度字段（key_fields）
- 承接上期数值的字段（carried_field）以及增减字段
- 派生字段（closing_field）
- 新记录需要清零的字段（reset_fields）
- 是否把负数结转值截断为 0
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from fastapi.encoders import jsonable_encoder

from app.models import KitRecord, GameRecord, BlazerRecord, ExpenseRecord
from app.services.balance import (
    ZERO, CategoryType, coerce_number, compute_blazer_stock, compute_closing,
    split_signed_quantity,
)

CategoryKey = Tuple[str, ...]


class CategoryVariant:
    """类别基类：单步结转（上期期末 → 本期期初）"""

    category_type: CategoryType
    model: Type
    key_fields: Tuple[str, ...]
    carried_field: str
    addition_field: str
    removal_field: str
    closing_field: str
    reset_fields: Tuple[str, ...]
    clamp_negative: bool = True

    @property
    def numeric_fields(self) -> Tuple[str, ...]:
        return (self.carried_field, self.addition_field, self.removal_field)

    def category_key(self, values: Mapping[str, Any]) -> Optional[CategoryKey]:
        """从表单/记录中取结转维度，任一维度为空则返回 None"""
        parts = []
        for name in self.key_fields:
            value = values.get(name)
            if value is None:
                return None
            value = str(value).strip()
            if not value:
                return None
            parts.append(value)
        return tuple(parts)

    def normalize_key(self, key: Any) -> Optional[CategoryKey]:
        """接受 字符串 / 元组 / 字典 形式的维度"""
        if key is None:
            return None
        if isinstance(key, Mapping):
            return self.category_key(key)
        if isinstance(key, str):
            if len(self.key_fields) != 1:
                return None
            return self.category_key({self.key_fields[0]: key})
        if isinstance(key, (tuple, list)):
            if len(key) != len(self.key_fields):
                return None
            return self.category_key(dict(zip(self.key_fields, key)))
        return None

    def trigger_key(self, values: Mapping[str, Any]) -> Optional[str]:
        """触发自动结转的组合键（如 Male-M-L），只由维度字段组成"""
        key = self.category_key(values)
        if key is None:
            return None
        return "-".join(key)

    def components(self, values: Any) -> Tuple[Decimal, Decimal, Decimal]:
        """(期初, 增加, 减少)"""
        return (
            coerce_number(_read(values, self.carried_field), self.carried_field),
            coerce_number(_read(values, self.addition_field), self.addition_field),
            coerce_number(_read(values, self.removal_field), self.removal_field),
        )

    def closing_of(self, values: Any) -> Decimal:
        """按组成字段重新计算期末值，不读取已存储的派生字段"""
        return compute_closing(self.category_type, *self.components(values))

    def preview_closing(self, values: Mapping[str, Any]) -> Decimal:
        """表单实时显示的期末值"""
        return self.closing_of(values)

    def defaults(self) -> Dict[str, Any]:
        """新表单的默认值"""
        data: Dict[str, Any] = {name: None for name in self.key_fields}
        for name in self.numeric_fields:
            data[name] = ZERO
        return data

    def clean_key_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """维度字段去除首尾空白，保证写入值与查询值一致"""
        for name in self.key_fields:
            value = data.get(name)
            if isinstance(value, str):
                data[name] = value.strip()
        return data

    def prepare(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """写入前整理：维度去空白，数值字段转换，派生字段丢弃"""
        data = {k: v for k, v in payload.items() if k != self.closing_field}
        for name in self.numeric_fields:
            data[name] = coerce_number(data.get(name), name)
        return self.clean_key_values(data)

    async def carried_value(self, store, key: CategoryKey) -> Optional[Decimal]:
        """上期期末值，无历史记录返回 None"""
        latest = await store.find_latest(self.category_type, key)
        if latest is None:
            return None
        return self.closing_of(latest)

    def snapshot(self, record: Any) -> Dict[str, Any]:
        """记录转为可写入日志的字典"""
        columns = [c.name for c in self.model.__table__.columns]
        return jsonable_encoder({name: getattr(record, name) for name in columns})


class KitVariant(CategoryVariant):
    category_type = CategoryType.KIT
    model = KitRecord
    key_fields = ("item_name",)
    carried_field = "opening_balance"
    addition_field = "addins"
    removal_field = "takeouts"
    closing_field = "closing_balance"
    reset_fields = ("addins", "takeouts")


class GameVariant(CategoryVariant):
    category_type = CategoryType.GAME
    model = GameRecord
    key_fields = ("game_details",)
    carried_field = "previous_stock"
    addition_field = "adding"
    removal_field = "sent"
    closing_field = "in_stock"
    reset_fields = ("adding", "sent")


class ExpenseVariant(CategoryVariant):
    """日常支出：上月超支需要带入下月，不截断负数"""
    category_type = CategoryType.EXPENSE
    model = ExpenseRecord
    key_fields = ("expense_category",)
    carried_field = "previous_month_overspend"
    addition_field = "fixed_amount"
    removal_field = "expenses"
    closing_field = "remaining_balance"
    reset_fields = ("expenses",)
    clamp_negative = False


class BlazerVariant(CategoryVariant):
    """西装：在库为全历史累计，而非上一条记录的单步结转

    表单中的 in_office_stock 表示录入前的在库数，quantity 为带符号变动。
    """
    category_type = CategoryType.BLAZER
    model = BlazerRecord
    key_fields = ("gender", "size")
    carried_field = "in_office_stock"
    addition_field = "added"
    removal_field = "sent"
    closing_field = "in_office_stock"
    reset_fields = ("quantity",)

    def components(self, values: Any) -> Tuple[Decimal, Decimal, Decimal]:
        if _read(values, "quantity") is not None and _read(values, "added") is None:
            _, added, sent = split_signed_quantity(_read(values, "quantity"))
        else:
            added = coerce_number(_read(values, "added"), "added")
            sent = coerce_number(_read(values, "sent"), "sent")
        return coerce_number(_read(values, self.carried_field), self.carried_field), added, sent

    def defaults(self) -> Dict[str, Any]:
        return {"gender": None, "size": None, "quantity": ZERO, "in_office_stock": ZERO}

    def prepare(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        data = {k: v for k, v in payload.items() if k not in ("in_office_stock", "added", "sent")}
        data["quantity"], data["added"], data["sent"] = split_signed_quantity(data.get("quantity"))
        return self.clean_key_values(data)

    async def carried_value(self, store, key: CategoryKey) -> Optional[Decimal]:
        history = await store.find_history(self.category_type, key)
        if not history:
            return None
        return compute_blazer_stock(history)


VARIANTS: Dict[CategoryType, CategoryVariant] = {
    CategoryType.KIT: KitVariant(),
    CategoryType.GAME: GameVariant(),
    CategoryType.BLAZER: BlazerVariant(),
    CategoryType.EXPENSE: ExpenseVariant(),
}

_missing = set(CategoryType) - set(VARIANTS)
if _missing:
    raise RuntimeError(f"结转类别未注册: {sorted(m.value for m in _missing)}")


def get_variant(category_type: Any) -> CategoryVariant:
    """按类别取定义，接受枚举或其值（kit/game/blazer/expense）"""
    return VARIANTS[CategoryType(category_type)]


def _read(values: Any, name: str) -> Any:
    if isinstance(values, Mapping):
        return values.get(name)
    return getattr(values, name, None)
