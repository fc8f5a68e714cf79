"""西装库存Schema"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import numeric_before, optional_numeric_before

BlazerGender = Literal["Male", "Female"]
BlazerSize = Literal[
    "F-XS", "F-S", "F-M", "F-L", "F-XL", "F-XXL",
    "M-XS", "M-S", "M-M", "M-L", "M-XL", "M-XXL",
]


class BlazerCreate(BaseModel):
    """新增西装收发（quantity 正数为收入，负数为发出）"""
    gender: BlazerGender = Field(..., description="性别")
    size: BlazerSize = Field(..., description="尺码")
    quantity: Decimal = Field(default=Decimal("0"), description="数量（带符号）")
    remarks: Optional[str] = Field(None, description="备注")

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return numeric_before(v, info)


class BlazerUpdate(BaseModel):
    """修改西装收发（性别尺码不可改）"""
    quantity: Optional[Decimal] = None
    added: Optional[Decimal] = Field(None, ge=0)
    sent: Optional[Decimal] = Field(None, ge=0)
    remarks: Optional[str] = None

    @field_validator("quantity", "added", "sent", mode="before")
    @classmethod
    def coerce_numbers(cls, v, info: ValidationInfo):
        return optional_numeric_before(v, info)


class BlazerResponse(BaseModel):
    id: int
    gender: str
    size: str
    quantity: Decimal
    added: Decimal
    sent: Decimal
    in_office_stock: Decimal
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BlazerListResponse(BaseModel):
    data: List[BlazerResponse]
    total: int
    page: int
    limit: int


class BlazerStock(BaseModel):
    """性别尺码当前在库（全历史累计）"""
    gender: str
    size: str
    in_office_stock: Decimal
    record_count: int
