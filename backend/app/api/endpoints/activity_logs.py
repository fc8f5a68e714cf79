"""操作日志API"""

from typing import Any, Optional
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db
from app.models.activity_log import ActivityLog
from app.schemas.activity_log import ActivityLogResponse, ActivityLogListResponse

router = APIRouter()


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(status_code=422, detail=f"日期格式应为 YYYY-MM-DD: {value}")


@router.get("/", response_model=ActivityLogListResponse)
async def list_logs(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    module_type: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    record_id: Optional[int] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None)) -> Any:
    """获取操作日志列表"""
    conditions = []
    if module_type:
        conditions.append(ActivityLog.module_type == module_type)
    if action:
        conditions.append(ActivityLog.action == action)
    if record_id:
        conditions.append(ActivityLog.record_id == record_id)
    if start_date:
        conditions.append(ActivityLog.created_at >= _parse_date(start_date))
    if end_date:
        # 包含结束当天
        conditions.append(ActivityLog.created_at < _parse_date(end_date) + timedelta(days=1))

    query = select(ActivityLog)
    count_query = select(func.count(ActivityLog.id))
    if conditions:
        query = query.where(and_(*conditions))
        count_query = count_query.where(and_(*conditions))

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    # 分页查询
    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    logs = result.scalars().all()

    return ActivityLogListResponse(
        data=[ActivityLogResponse.model_validate(log) for log in logs],
        total=total,
        page=page,
        limit=limit
    )
