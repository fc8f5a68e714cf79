"""游戏器材API"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_record_service, http_error
from app.core.deps import get_db
from app.models.game import GameRecord
from app.schemas.game import GameCreate, GameUpdate, GameResponse, GameListResponse, GameStock
from app.services.balance import CategoryType
from app.services.categories import get_variant
from app.services.exceptions import RecordError
from app.services.record_service import RecordService
from app.services.stock_summary import summarize_item_stock

router = APIRouter()


@router.get("/", response_model=GameListResponse)
async def list_games(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    game_details: Optional[str] = Query(None),
    search: Optional[str] = Query(None)) -> Any:
    """获取游戏器材登记列表（最新在前）"""
    conditions = []
    if game_details:
        conditions.append(GameRecord.game_details == game_details)
    if search:
        conditions.append(GameRecord.game_details.contains(search))

    count_query = select(func.count(GameRecord.id))
    query = select(GameRecord)
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(GameRecord.created_at.desc(), GameRecord.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)

    return GameListResponse(
        data=[GameResponse.model_validate(r) for r in result.scalars().all()],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/stock", response_model=List[GameStock])
async def game_stock(
    *,
    db: AsyncSession = Depends(get_db),
    search: Optional[str] = Query(None)) -> Any:
    """各游戏器材当前库存

    当前库存取每个游戏最新一条登记重算的在库数。
    """
    query = select(GameRecord).order_by(GameRecord.created_at.asc(), GameRecord.id.asc())
    if search:
        query = query.where(GameRecord.game_details.contains(search))

    result = await db.execute(query)
    rows = summarize_item_stock(get_variant(CategoryType.GAME), result.scalars().all())
    return [GameStock(**row) for row in rows]


@router.post("/", response_model=GameResponse, status_code=201)
async def create_game(
    *,
    service: RecordService = Depends(get_record_service),
    game_in: GameCreate) -> Any:
    """新增游戏器材登记"""
    try:
        record = await service.create_record(CategoryType.GAME, game_in.model_dump())
    except RecordError as e:
        raise http_error(e)
    return record


@router.put("/{record_id}", response_model=GameResponse)
async def update_game(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int,
    game_in: GameUpdate) -> Any:
    """修改游戏器材登记（行内编辑）"""
    try:
        record = await service.update_record(
            CategoryType.GAME, record_id, game_in.model_dump(exclude_unset=True)
        )
    except RecordError as e:
        raise http_error(e)
    return record


@router.delete("/{record_id}")
async def delete_game(
    *,
    service: RecordService = Depends(get_record_service),
    record_id: int) -> Any:
    """删除游戏器材登记"""
    try:
        await service.delete_record(CategoryType.GAME, record_id)
    except RecordError as e:
        raise http_error(e)
    return {"message": "删除成功"}
