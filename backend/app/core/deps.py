"""依赖注入 - 单机版（无认证）"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import session as db_session
from app.services.record_store import RecordStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话依赖
    """
    async with db_session.SessionLocal() as session:
        yield session


def get_record_store() -> RecordStore:
    """
    获取记录仓库（每次查询独立会话，供自动结转使用）
    """
    return RecordStore(db_session.SessionLocal)
