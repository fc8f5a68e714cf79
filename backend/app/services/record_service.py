"""
记录写入服务

所有新增、修改、删除都经过这里，保证派生字段始终由组成字段计算：
- 套件/游戏/支出：期末 = 期初 + 增加 - 减少
- 西装：in_office_stock = 截至该条记录的累计 (added - sent)，任何修改后整条链重算
"""

from typing import Any, Dict, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.services.activity_logger import ActivityLogger
from app.services.balance import ZERO, CategoryType, coerce_number, compute_closing
from app.services.categories import CategoryKey, CategoryVariant, get_variant
from app.services.exceptions import RecordNotFoundError, RecordValidationError, RecordWriteError
from app.services.record_store import select_history

logger = get_logger(__name__)


class RecordService:
    """模块记录的增删改"""

    def __init__(self, db: AsyncSession, activity_logger: ActivityLogger):
        self.db = db
        self.activity = activity_logger

    async def create_record(self, category_type: Any, payload: Mapping[str, Any]):
        variant = get_variant(category_type)
        module_type = variant.category_type.table_name

        key = variant.category_key(payload)
        if key is None:
            raise RecordValidationError(
                f"请填写{'、'.join(variant.key_fields)}", payload=dict(payload)
            )

        data = variant.prepare(payload)
        record = variant.model(**data)
        self.db.add(record)

        try:
            if variant.category_type == CategoryType.BLAZER:
                await self._recalculate_blazer_chain(variant, key)
            else:
                setattr(record, variant.closing_field, variant.closing_of(record))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"❌ 新增记录失败 {module_type}: {e}")
            await self.activity.log_error(module_type, "create", e, record_data=dict(payload))
            raise RecordWriteError("保存失败，请检查填写内容后重试", payload=dict(payload)) from e

        await self.db.refresh(record)
        logger.info(f"新增记录 {module_type}#{record.id}")
        await self.activity.log_success(
            module_type, "create", record_id=record.id, new_value=variant.snapshot(record)
        )
        return record

    async def update_record(self, category_type: Any, record_id: int, changes: Mapping[str, Any]):
        variant = get_variant(category_type)
        module_type = variant.category_type.table_name

        record = await self._get(variant, record_id)
        old_value = variant.snapshot(record)

        self._apply_changes(variant, record, changes)
        key = variant.category_key(_row_dict(variant, record))
        if key is None:
            raise RecordValidationError(
                f"{'、'.join(variant.key_fields)} 不能为空", payload=dict(changes)
            )

        try:
            if variant.category_type == CategoryType.BLAZER:
                await self._recalculate_blazer_chain(variant, key)
            else:
                setattr(record, variant.closing_field, variant.closing_of(record))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"❌ 更新记录失败 {module_type}#{record_id}: {e}")
            await self.activity.log_error(
                module_type, "update", e, record_data=dict(changes), record_id=record_id
            )
            raise RecordWriteError("更新失败，请稍后重试", payload=dict(changes)) from e

        await self.db.refresh(record)
        logger.info(f"更新记录 {module_type}#{record_id}: {sorted(changes)}")
        await self.activity.log_success(
            module_type, "update", record_id=record_id,
            old_value=old_value, new_value=variant.snapshot(record)
        )
        return record

    async def delete_record(self, category_type: Any, record_id: int) -> None:
        variant = get_variant(category_type)
        module_type = variant.category_type.table_name

        record = await self._get(variant, record_id)
        old_value = variant.snapshot(record)
        key = variant.category_key(old_value)

        try:
            await self.db.delete(record)
            if variant.category_type == CategoryType.BLAZER and key is not None:
                await self._recalculate_blazer_chain(variant, key)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"❌ 删除记录失败 {module_type}#{record_id}: {e}")
            await self.activity.log_error(module_type, "delete", e, record_id=record_id)
            raise RecordWriteError("删除失败，请稍后重试") from e

        logger.info(f"删除记录 {module_type}#{record_id}")
        await self.activity.log_success(module_type, "delete", record_id=record_id, old_value=old_value)

    async def _get(self, variant: CategoryVariant, record_id: int):
        record = await self.db.get(variant.model, record_id)
        if not record:
            raise RecordNotFoundError("记录不存在")
        return record

    def _apply_changes(self, variant: CategoryVariant, record, changes: Mapping[str, Any]) -> None:
        """合并修改，派生字段的传入值忽略"""
        changes = dict(changes)
        changes.pop(variant.closing_field, None)
        variant.clean_key_values(changes)

        if variant.category_type == CategoryType.BLAZER:
            self._apply_blazer_changes(record, changes)
            return

        for name, value in changes.items():
            if name in variant.numeric_fields:
                value = coerce_number(value, name)
            setattr(record, name, value)

    def _apply_blazer_changes(self, record, changes: Dict[str, Any]) -> None:
        """西装：性别尺码不可改；quantity 与 added/sent 互相换算"""
        for name in ("gender", "size"):
            if name in changes and changes[name] != getattr(record, name):
                raise RecordValidationError("西装记录的性别和尺码不可修改", payload=changes)
            changes.pop(name, None)

        if "quantity" in changes:
            quantity = coerce_number(changes.pop("quantity"), "quantity")
            record.quantity = quantity
            record.added = quantity if quantity > 0 else ZERO
            record.sent = -quantity if quantity < 0 else ZERO
        elif "added" in changes or "sent" in changes:
            added = coerce_number(changes.pop("added", record.added), "added")
            sent = coerce_number(changes.pop("sent", record.sent), "sent")
            if added < 0 or sent < 0:
                raise RecordValidationError("收入和发出数量不能为负数", payload=changes)
            record.added = added
            record.sent = sent
            record.quantity = added - sent

        for name, value in changes.items():
            setattr(record, name, value)

    async def _recalculate_blazer_chain(self, variant: CategoryVariant, key: CategoryKey) -> None:
        """按时间顺序重算同性别尺码每条记录的累计在库"""
        await self.db.flush()
        result = await self.db.execute(select_history(variant, key))
        running = ZERO
        for row in result.scalars().all():
            running = compute_closing(CategoryType.BLAZER, running, row.added, row.sent)
            row.in_office_stock = running


def _row_dict(variant: CategoryVariant, record) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in variant.key_fields}
