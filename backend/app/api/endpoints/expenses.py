"""日常支出API"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_record_service, http_error
from app.core.deps import get_db
from app.models.expense import ExpenseRecord
from app.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseListResponse
from app.services.balance import CategoryType
from app.services.exceptions import RecordError
from app.services.record_service import RecordService

router = APIRouter()


@router.get("/", response_model=ExpenseListResponse)
async def list_expenses(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    expense_category: Optional[str] = Query(None),
    search: Optional[str] = Query(None)) -> Any:
    """获取日常支出列表（最新在前）"""
    conditions = []
    if expense_category:
        conditions.append(ExpenseRecord.expense_category == expense_category)
    if search:
        conditions.append(ExpenseRecord.expense_category.contains(search))

    count_query = select(func.count(ExpenseRecord.id))
    query = select(ExpenseRecord)
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(ExpenseRecord.created_at.desc(), ExpenseRecord.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)

    return ExpenseListResponse(
        data=[ExpenseResponse.model_validate(r) for r in result.scalars().all()],
        total=total,
        page=page,
        limit=limit
    )


@router.post("/", response_model=ExpenseResponse, status_code=201)
async def create_expense(
    *,
    service: RecordService = Depends(get_record_service),
    expense_in: ExpenseCreate) -> Any:
    """新增日常支出"""
    try:
        record = await service.create_record(CategoryType.EXPENSE, expense_in.model_dump())
    except RecordError as e:
        raise http_error(e)
    return record


@router.put("/{record_id}", response_model=ExpenseResponse)
async def update_expense(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int,
    expense_in: ExpenseUpdate) -> Any:
    """修改日常支出（行内编辑）"""
    try:
        record = await service.update_record(
            CategoryType.EXPENSE, record_id, expense_in.model_dump(exclude_unset=True)
        )
    except RecordError as e:
        raise http_error(e)
    return record


@router.delete("/{record_id}")
async def delete_expense(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int) -> Any:
    """删除日常支出"""
    try:
        await service.delete_record(CategoryType.EXPENSE, record_id)
    except RecordError as e:
        raise http_error(e)
    return {"message": "删除成功"}
