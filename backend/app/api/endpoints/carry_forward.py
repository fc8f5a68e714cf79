"""自动结转API - 新增表单选择物品/尺码后预填期初"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_resolver
from app.schemas.carry_forward import CarryForwardResponse
from app.services.balance import CategoryType
from app.services.carry_forward import CarryForwardResolver
from app.services.categories import get_variant

router = APIRouter()


@router.get("/{category_type}", response_model=CarryForwardResponse)
async def resolve_opening(
    *,
    resolver: CarryForwardResolver = Depends(get_resolver),
    category_type: CategoryType,
    item_name: Optional[str] = Query(None, description="套件物品名称"),
    game_details: Optional[str] = Query(None, description="游戏名称"),
    gender: Optional[str] = Query(None, description="西装性别"),
    size: Optional[str] = Query(None, description="西装尺码"),
    expense_category: Optional[str] = Query(None, description="支出类别")) -> Any:
    """获取新记录的期初值

    无历史记录或查询失败时 source=none，opening=0；维度不完整时 opening 为空。
    """
    variant = get_variant(category_type)
    fields = {
        "item_name": item_name,
        "game_details": game_details,
        "gender": gender,
        "size": size,
        "expense_category": expense_category,
    }
    result = await resolver.resolve_opening_value(category_type, fields)

    return CarryForwardResponse(
        category_type=category_type.value,
        trigger_key=variant.trigger_key(fields),
        field=variant.carried_field,
        opening=result.opening,
        source=result.source,
        resets=result.resets)
