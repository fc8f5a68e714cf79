"""
记录仓库 - 按结转维度查询历史记录

每次查询使用独立会话，不依赖调用方的事务，可在表单录入过程中随时调用。
"""

from typing import Any, List, Optional

from sqlalchemy import Select, and_, select

from app.core.logging_config import get_logger
from app.services.categories import CategoryKey, CategoryVariant, get_variant

logger = get_logger(__name__)


def _key_conditions(variant: CategoryVariant, key: CategoryKey) -> list:
    model = variant.model
    return [getattr(model, name) == value for name, value in zip(variant.key_fields, key)]


def select_latest(variant: CategoryVariant, key: CategoryKey) -> Select:
    """同维度最新一条记录（created_at 相同时按 id 取后写入的）"""
    model = variant.model
    return (
        select(model)
        .where(and_(*_key_conditions(variant, key)))
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(1)
    )


def select_history(variant: CategoryVariant, key: CategoryKey) -> Select:
    """同维度全部记录，按时间正序"""
    model = variant.model
    return (
        select(model)
        .where(and_(*_key_conditions(variant, key)))
        .order_by(model.created_at.asc(), model.id.asc())
    )


class RecordStore:
    """基于 SQLAlchemy 异步会话的记录仓库"""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def find_latest(self, category_type: Any, key: CategoryKey) -> Optional[Any]:
        variant = get_variant(category_type)
        async with self._session_factory() as db:
            result = await db.execute(select_latest(variant, key))
            record = result.scalars().first()
        logger.debug(f"查询最新记录 {variant.category_type.value}{key}: {record!r}")
        return record

    async def find_history(self, category_type: Any, key: CategoryKey) -> List[Any]:
        variant = get_variant(category_type)
        async with self._session_factory() as db:
            result = await db.execute(select_history(variant, key))
            records = list(result.scalars().all())
        logger.debug(f"查询历史记录 {variant.category_type.value}{key}: {len(records)} 条")
        return records
