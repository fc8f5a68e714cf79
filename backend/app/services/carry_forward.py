"""
期初自动结转

根据类别和维度找到上期记录，重新计算其期末值作为新记录的期初值。
查询失败或超时不影响录入，返回 source="none"。
"""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.logging_config import get_logger
from app.services.balance import ZERO
from app.services.categories import get_variant

logger = get_logger(__name__)

SOURCE_CARRIED = "carried"
SOURCE_NONE = "none"


@dataclass(frozen=True)
class OpeningResult:
    """结转结果

    无历史或查询失败时 opening 为 0；维度不完整时不查询，opening 为 None。
    source="none" 时表单应保持默认值而不是显示结转值。
    """
    opening: Optional[Decimal] = ZERO
    source: str = SOURCE_NONE
    field_name: Optional[str] = None
    resets: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def carried(self) -> bool:
        return self.source == SOURCE_CARRIED

    @classmethod
    def none(cls, field_name: Optional[str] = None) -> "OpeningResult":
        return cls(opening=ZERO, source=SOURCE_NONE, field_name=field_name)

    @classmethod
    def no_key(cls, field_name: Optional[str] = None) -> "OpeningResult":
        return cls(opening=None, source=SOURCE_NONE, field_name=field_name)


class CarryForwardResolver:
    """期初结转解析器"""

    def __init__(self, store, timeout: Optional[float] = None):
        self.store = store
        self.timeout = settings.AUTO_CARRY_LOOKUP_TIMEOUT if timeout is None else timeout

    async def resolve_opening_value(self, category_type: Any, category_key: Any) -> OpeningResult:
        """
        获取新记录的期初值

        Args:
            category_type: kit / game / blazer / expense
            category_key: 维度值，单维度为字符串，西装为 (gender, size)

        Returns:
            OpeningResult，维度不完整、无历史、查询失败时 source 均为 "none"，
            其中维度不完整时 opening 为 None
        """
        variant = get_variant(category_type)
        key = variant.normalize_key(category_key)
        if key is None:
            logger.debug(f"维度不完整，跳过结转: {variant.category_type.value} {category_key!r}")
            return OpeningResult.no_key(variant.carried_field)

        try:
            value = await asyncio.wait_for(variant.carried_value(self.store, key), self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ 上期记录查询超时({self.timeout}s): {variant.category_type.value}{key}")
            return OpeningResult.none(variant.carried_field)
        except Exception as e:
            logger.warning(f"上期记录查询失败，跳过结转: {variant.category_type.value}{key}: {e}")
            return OpeningResult.none(variant.carried_field)

        if value is None:
            logger.info(f"无历史记录: {variant.category_type.value}{key}")
            return OpeningResult.none(variant.carried_field)

        if variant.clamp_negative and value < 0:
            logger.info(f"上期结余为负({value})，期初按 0 结转: {variant.category_type.value}{key}")
            value = ZERO

        logger.info(f"✅ 自动结转 {variant.category_type.value}{key}: {variant.carried_field}={value}")
        return OpeningResult(
            opening=value,
            source=SOURCE_CARRIED,
            field_name=variant.carried_field,
            resets={name: ZERO for name in variant.reset_fields},
        )

