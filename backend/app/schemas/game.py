"""游戏器材Schema"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import numeric_before, optional_numeric_before


class GameBase(BaseModel):
    game_details: str = Field(..., min_length=1, max_length=100, description="游戏名称")
    sent_by: Optional[str] = Field(None, max_length=100, description="经手人")


class GameCreate(GameBase):
    """新增游戏器材登记"""
    previous_stock: Decimal = Field(default=Decimal("0"), description="上期库存")
    adding: Decimal = Field(default=Decimal("0"), description="新增")
    sent: Decimal = Field(default=Decimal("0"), description="发出")

    @field_validator("previous_stock", "adding", "sent", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return numeric_before(v, info)


class GameUpdate(BaseModel):
    game_details: Optional[str] = Field(None, min_length=1, max_length=100)
    previous_stock: Optional[Decimal] = None
    adding: Optional[Decimal] = None
    sent: Optional[Decimal] = None
    sent_by: Optional[str] = None

    @field_validator("previous_stock", "adding", "sent", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return optional_numeric_before(v, info)


class GameResponse(GameBase):
    id: int
    previous_stock: Decimal
    adding: Decimal
    sent: Decimal
    in_stock: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GameListResponse(BaseModel):
    data: List[GameResponse]
    total: int
    page: int
    limit: int


class GameStock(BaseModel):
    """游戏器材当前库存"""
    game_details: str
    opening_stock: Decimal
    total_received: Decimal
    total_distributed: Decimal
    current_stock: Decimal
    record_count: int
