"""日常支出Schema"""
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import numeric_before, optional_numeric_before


class ExpenseBase(BaseModel):
    date: Optional[date_type] = Field(None, description="支出日期")
    expense_category: str = Field(..., min_length=1, max_length=100, description="支出类别")
    remarks: Optional[str] = Field(None, description="备注")


class ExpenseCreate(ExpenseBase):
    """新增支出（上月结余一般由自动结转预填，可为负数）"""
    fixed_amount: Decimal = Field(default=Decimal("0"), description="固定额度")
    previous_month_overspend: Decimal = Field(default=Decimal("0"), description="上月结余")
    expenses: Decimal = Field(default=Decimal("0"), description="支出")

    @field_validator("fixed_amount", "previous_month_overspend", "expenses", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return numeric_before(v, info)


class ExpenseUpdate(BaseModel):
    date: Optional[date_type] = None
    expense_category: Optional[str] = Field(None, min_length=1, max_length=100)
    fixed_amount: Optional[Decimal] = None
    previous_month_overspend: Optional[Decimal] = None
    expenses: Optional[Decimal] = None
    remarks: Optional[str] = None

    @field_validator("fixed_amount", "previous_month_overspend", "expenses", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return optional_numeric_before(v, info)


class ExpenseResponse(ExpenseBase):
    id: int
    fixed_amount: Decimal
    previous_month_overspend: Decimal
    expenses: Decimal
    remaining_balance: Decimal
    is_overspent: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    data: List[ExpenseResponse]
    total: int
    page: int
    limit: int
