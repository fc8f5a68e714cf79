"""套件库存Schema"""
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import numeric_before, optional_numeric_before


class KitBase(BaseModel):
    """套件登记基础字段"""
    date: Optional[date_type] = Field(None, description="登记日期")
    item_name: str = Field(..., min_length=1, max_length=100, description="物品名称")
    remarks: Optional[str] = Field(None, description="备注")


class KitCreate(KitBase):
    """新增套件登记（期初余额一般由自动结转预填）"""
    opening_balance: Decimal = Field(default=Decimal("0"), description="期初余额")
    addins: Decimal = Field(default=Decimal("0"), description="入库")
    takeouts: Decimal = Field(default=Decimal("0"), description="出库")

    @field_validator("opening_balance", "addins", "takeouts", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return numeric_before(v, info)


class KitUpdate(BaseModel):
    """修改套件登记（期末余额自动重算）"""
    date: Optional[date_type] = None
    item_name: Optional[str] = Field(None, min_length=1, max_length=100)
    opening_balance: Optional[Decimal] = None
    addins: Optional[Decimal] = None
    takeouts: Optional[Decimal] = None
    remarks: Optional[str] = None

    @field_validator("opening_balance", "addins", "takeouts", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return optional_numeric_before(v, info)


class KitResponse(KitBase):
    """套件登记响应"""
    id: int
    opening_balance: Decimal
    addins: Decimal
    takeouts: Decimal
    closing_balance: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class KitListResponse(BaseModel):
    """套件登记列表响应"""
    data: List[KitResponse]
    total: int
    page: int
    limit: int


class KitStock(BaseModel):
    """物品当前库存（按全部登记汇总）"""
    item_name: str
    opening_stock: Decimal
    total_received: Decimal
    total_distributed: Decimal
    current_stock: Decimal
    record_count: int
