"""
操作日志记录

日志在主操作提交之后用独立会话写入，写入失败只记录错误，不影响主操作。
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder

from app.core.logging_config import get_logger
from app.models.activity_log import ActivityLog, MODULE_NAMES

logger = get_logger(__name__)

ACTION_LABELS = {
    "create": "Record Added Successfully",
    "update": "Record Updated Successfully",
    "delete": "Record Deleted Successfully",
    "create_error": "Record Addition Failed",
    "update_error": "Record Update Failed",
    "delete_error": "Record Deletion Failed",
}


def build_description(module_type: str, action: str, record_data: Optional[Dict[str, Any]] = None) -> str:
    """日志摘要，西装收发写明数量、性别和尺码"""
    module_name = MODULE_NAMES.get(module_type, module_type)
    summary = ACTION_LABELS.get(action, action)

    if module_type == "blazer_inventory" and record_data and action in ("create", "create_error"):
        gender = record_data.get("gender")
        size = record_data.get("size")
        quantity = record_data.get("quantity")
        if gender and size and quantity:
            display_size = str(size).replace("F-", "").replace("M-", "")
            verb = "Added" if action == "create" else "Failed to add"
            summary = f"{verb} {_format_quantity(quantity)} {gender} - {display_size} Blazers"

    return f"Module: {module_name} | Summary: {summary}"


def _format_quantity(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    return str(int(number)) if number.is_integer() else str(number)


class ActivityLogger:
    """操作日志写入器"""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def log_success(
        self,
        module_type: str,
        action: str,
        record_id: Optional[int] = None,
        old_value: Optional[Dict[str, Any]] = None,
        new_value: Optional[Dict[str, Any]] = None) -> Optional[ActivityLog]:
        """记录成功操作"""
        return await self._write(
            module_type=module_type,
            action=action,
            record_id=record_id,
            description=build_description(module_type, action, new_value or old_value),
            old_value=old_value,
            new_value=new_value,
        )

    async def log_error(
        self,
        module_type: str,
        action: str,
        error: BaseException,
        record_data: Optional[Dict[str, Any]] = None,
        record_id: Optional[int] = None) -> Optional[ActivityLog]:
        """记录失败操作"""
        error_action = f"{action}_error"
        return await self._write(
            module_type=module_type,
            action=error_action,
            record_id=record_id,
            description=build_description(module_type, error_action, record_data),
            new_value=record_data,
            error_details={
                "type": type(error).__name__,
                "message": str(error) or "Unknown error",
            },
        )

    async def _write(self, **fields) -> Optional[ActivityLog]:
        for name in ("old_value", "new_value"):
            if fields.get(name) is not None:
                fields[name] = jsonable_encoder(fields[name])
        try:
            async with self._session_factory() as db:
                log = ActivityLog(**fields)
                db.add(log)
                await db.commit()
                return log
        except Exception as e:
            logger.error(f"❌ 操作日志写入失败 {fields.get('module_type')}/{fields.get('action')}: {e}")
            return None
