"""西装库存API"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_record_service, http_error
from app.core.deps import get_db
from app.models.blazer import BlazerRecord, BLAZER_SIZES
from app.schemas.blazer import (
    BlazerCreate, BlazerUpdate, BlazerResponse, BlazerListResponse, BlazerStock
)
from app.services.balance import CategoryType
from app.services.exceptions import RecordError
from app.services.record_service import RecordService

router = APIRouter()


@router.get("/", response_model=BlazerListResponse)
async def list_blazers(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    gender: Optional[str] = Query(None),
    size: Optional[str] = Query(None)) -> Any:
    """获取西装收发列表（最新在前）"""
    conditions = []
    if gender:
        conditions.append(BlazerRecord.gender == gender)
    if size:
        conditions.append(BlazerRecord.size == size)

    count_query = select(func.count(BlazerRecord.id))
    query = select(BlazerRecord)
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(BlazerRecord.created_at.desc(), BlazerRecord.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)

    return BlazerListResponse(
        data=[BlazerResponse.model_validate(r) for r in result.scalars().all()],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/stock", response_model=List[BlazerStock])
async def blazer_stock(
    *,
    db: AsyncSession = Depends(get_db),
    gender: Optional[str] = Query(None)) -> Any:
    """各性别尺码当前在库

    在库按全部历史 (added - sent) 汇总，不读取记录上的 in_office_stock。
    """
    query = select(
        BlazerRecord.gender,
        BlazerRecord.size,
        func.coalesce(func.sum(BlazerRecord.added - BlazerRecord.sent), 0).label("stock"),
        func.count(BlazerRecord.id).label("record_count"),
    ).group_by(BlazerRecord.gender, BlazerRecord.size)
    if gender:
        query = query.where(BlazerRecord.gender == gender)

    rows = (await db.execute(query)).all()
    size_order = {s: i for i, s in enumerate(BLAZER_SIZES)}
    rows = sorted(rows, key=lambda r: (r.gender, size_order.get(r.size, len(size_order))))

    return [
        BlazerStock(
            gender=row.gender,
            size=row.size,
            in_office_stock=row.stock,
            record_count=row.record_count)
        for row in rows
    ]


@router.post("/", response_model=BlazerResponse, status_code=201)
async def create_blazer(
    *,
    service: RecordService = Depends(get_record_service),
    blazer_in: BlazerCreate) -> Any:
    """新增西装收发"""
    try:
        record = await service.create_record(CategoryType.BLAZER, blazer_in.model_dump())
    except RecordError as e:
        raise http_error(e)
    return record


@router.put("/{record_id}", response_model=BlazerResponse)
async def update_blazer(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int,
    blazer_in: BlazerUpdate) -> Any:
    """修改西装收发（整条性别尺码链的在库会重算）"""
    try:
        record = await service.update_record(
            CategoryType.BLAZER, record_id, blazer_in.model_dump(exclude_unset=True)
        )
    except RecordError as e:
        raise http_error(e)
    return record


@router.delete("/{record_id}")
async def delete_blazer(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int) -> Any:
    """删除西装收发"""
    try:
        await service.delete_record(CategoryType.BLAZER, record_id)
    except RecordError as e:
        raise http_error(e)
    return {"message": "删除成功"}
