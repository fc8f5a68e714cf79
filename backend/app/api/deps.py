"""API依赖 - 单机版（无认证）"""
from fastapi import Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db, get_record_store
from app.db import session as db_session
from app.services.activity_logger import ActivityLogger
from app.services.carry_forward import CarryForwardResolver
from app.services.exceptions import (
    RecordError, RecordNotFoundError, RecordValidationError,
)
from app.services.record_service import RecordService
from app.services.record_store import RecordStore


def get_activity_logger() -> ActivityLogger:
    """操作日志使用独立会话，不随主操作回滚"""
    return ActivityLogger(db_session.SessionLocal)


def get_record_service(
    db: AsyncSession = Depends(get_db),
    activity_logger: ActivityLogger = Depends(get_activity_logger)) -> RecordService:
    return RecordService(db, activity_logger)


def get_resolver(store: RecordStore = Depends(get_record_store)) -> CarryForwardResolver:
    return CarryForwardResolver(store)


def http_error(e: RecordError) -> HTTPException:
    """业务异常转换为 HTTP 错误，写入失败时回传提交内容便于用户重试"""
    if isinstance(e, RecordNotFoundError):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, RecordValidationError):
        return HTTPException(status_code=422, detail=e.message)
    return HTTPException(
        status_code=400,
        detail={"message": e.message, "payload": jsonable_encoder(e.payload)},
    )
