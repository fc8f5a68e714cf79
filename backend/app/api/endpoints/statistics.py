"""统计API"""

from datetime import datetime
from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db
from app.models.activity_log import MODULE_NAMES
from app.schemas.statistics import DashboardStats, ModuleStat
from app.services.balance import CategoryType
from app.services.categories import get_variant

router = APIRouter()


@router.get("/", response_model=DashboardStats)
async def get_dashboard_stats(
    *,
    db: AsyncSession = Depends(get_db)) -> Any:
    """首页统计：各模块记录总数和今日新增（按 UTC 日期）"""
    today_start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

    modules = []
    for category_type in CategoryType:
        model = get_variant(category_type).model
        row = (await db.execute(
            select(
                func.count(model.id),
                func.coalesce(func.sum(case((model.created_at >= today_start, 1), else_=0)), 0),
            )
        )).first()
        modules.append(ModuleStat(
            module_type=category_type.table_name,
            module_name=MODULE_NAMES.get(category_type.table_name, category_type.table_name),
            total_records=int(row[0]) if row else 0,
            todays_entries=int(row[1]) if row else 0,
        ))

    return DashboardStats(
        total_records=sum(m.total_records for m in modules),
        todays_entries=sum(m.todays_entries for m in modules),
        active_modules=len(modules),
        modules=modules,
    )
