"""套件库存API"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_record_service, http_error
from app.core.deps import get_db
from app.models.kit import KitRecord
from app.schemas.kit import KitCreate, KitUpdate, KitResponse, KitListResponse, KitStock
from app.services.balance import CategoryType
from app.services.categories import get_variant
from app.services.exceptions import RecordError
from app.services.record_service import RecordService
from app.services.stock_summary import summarize_item_stock

router = APIRouter()


@router.get("/", response_model=KitListResponse)
async def list_kits(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    item_name: Optional[str] = Query(None),
    search: Optional[str] = Query(None)) -> Any:
    """获取套件登记列表（最新在前）"""
    conditions = []
    if item_name:
        conditions.append(KitRecord.item_name == item_name)
    if search:
        conditions.append(KitRecord.item_name.contains(search))

    count_query = select(func.count(KitRecord.id))
    query = select(KitRecord)
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(KitRecord.created_at.desc(), KitRecord.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)

    return KitListResponse(
        data=[KitResponse.model_validate(r) for r in result.scalars().all()],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/stock", response_model=List[KitStock])
async def kit_stock(
    *,
    db: AsyncSession = Depends(get_db),
    search: Optional[str] = Query(None)) -> Any:
    """各物品当前库存

    当前库存取每个物品最新一条登记重算的期末余额。
    """
    query = select(KitRecord).order_by(KitRecord.created_at.asc(), KitRecord.id.asc())
    if search:
        query = query.where(KitRecord.item_name.contains(search))

    result = await db.execute(query)
    rows = summarize_item_stock(get_variant(CategoryType.KIT), result.scalars().all())
    return [KitStock(**row) for row in rows]


@router.post("/", response_model=KitResponse, status_code=201)
async def create_kit(
    *,
    service: RecordService = Depends(get_record_service),
    kit_in: KitCreate) -> Any:
    """新增套件登记"""
    try:
        record = await service.create_record(CategoryType.KIT, kit_in.model_dump())
    except RecordError as e:
        raise http_error(e)
    return record


@router.put("/{record_id}", response_model=KitResponse)
async def update_kit(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int,
    kit_in: KitUpdate) -> Any:
    """修改套件登记（行内编辑）"""
    try:
        record = await service.update_record(
            CategoryType.KIT, record_id, kit_in.model_dump(exclude_unset=True)
        )
    except RecordError as e:
        raise http_error(e)
    return record


@router.delete("/{record_id}")
async def delete_kit(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int) -> Any:
    """删除套件登记"""
    try:
        await service.delete_record(CategoryType.KIT, record_id)
    except RecordError as e:
        raise http_error(e)
    return {"message": "删除成功"}
