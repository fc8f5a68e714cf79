"""
库存汇总 - 套件/游戏按物品汇总收发

- opening_stock:     该物品第一条记录的期初
- total_received:    全部记录的增加之和
- total_distributed: 全部记录的减少之和
- current_stock:     最新一条记录按组成字段重算的期末
"""

from typing import Any, Dict, Iterable, List

from app.services.balance import ZERO
from app.services.categories import CategoryVariant


def summarize_item_stock(variant: CategoryVariant, records: Iterable[Any]) -> List[Dict[str, Any]]:
    """records 需按 created_at、id 正序传入，结果按物品名排序"""
    summary: Dict[str, Dict[str, Any]] = {}
    for record in records:
        key = variant.category_key({name: getattr(record, name) for name in variant.key_fields})
        if key is None:
            continue
        opening, addition, removal = variant.components(record)
        item = summary.get(key[0])
        if item is None:
            item = summary[key[0]] = {
                variant.key_fields[0]: key[0],
                "opening_stock": opening,
                "total_received": ZERO,
                "total_distributed": ZERO,
                "current_stock": ZERO,
                "record_count": 0,
            }
        item["total_received"] += addition
        item["total_distributed"] += removal
        item["current_stock"] = variant.closing_of(record)
        item["record_count"] += 1

    return [summary[name] for name in sorted(summary, key=str.lower)]
