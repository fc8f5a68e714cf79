"""
测试公共夹具

- 每个测试独立的临时 SQLite 数据库（NullPool，每个会话一个连接）
- 可控制延迟与失败的内存记录仓库
- run：用 asyncio.run 执行协程
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from app.db.init_db import ensure_tables_exist
from app.db.session import create_session_factory
from app.services.balance import CategoryType
from app.services.categories import get_variant


def run(coro):
    """在新的事件循环中执行协程"""
    return asyncio.run(coro)


@pytest.fixture
def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    run(ensure_tables_exist(eng))
    yield eng
    run(eng.dispose())


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


class FakeRecord:
    """代替 ORM 行的属性对象"""

    def __init__(self, **fields):
        self.__dict__.update(fields)


class FakeStore:
    """
    内存记录仓库

    按 (category_type, key) 保存插入顺序的记录，可按维度设置延迟，
    fail_with 设置后所有查询抛出该异常。
    """

    def __init__(self):
        self.records: Dict[Tuple[CategoryType, Tuple[str, ...]], List[FakeRecord]] = {}
        self.delays: Dict[Tuple[str, ...], float] = {}
        self.events: Dict[Tuple[str, ...], asyncio.Event] = {}
        self.fail_with: Optional[BaseException] = None
        self.calls: List[Tuple[CategoryType, Tuple[str, ...]]] = []
        self._clock = datetime(2024, 1, 1)

    def add(self, category_type: Any, **fields) -> FakeRecord:
        variant = get_variant(category_type)
        key = variant.category_key(fields)
        self._clock += timedelta(minutes=1)
        record = FakeRecord(created_at=self._clock, **fields)
        self.records.setdefault((variant.category_type, key), []).append(record)
        return record

    async def _before(self, category_type, key):
        self.calls.append((CategoryType(category_type), tuple(key)))
        if key in self.events:
            await self.events[key].wait()
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        if self.fail_with is not None:
            raise self.fail_with

    async def find_latest(self, category_type, key):
        await self._before(category_type, key)
        rows = self.records.get((CategoryType(category_type), tuple(key)), [])
        return rows[-1] if rows else None

    async def find_history(self, category_type, key):
        await self._before(category_type, key)
        return list(self.records.get((CategoryType(category_type), tuple(key)), []))


@pytest.fixture
def fake_store():
    return FakeStore()
