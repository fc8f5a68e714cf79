"""自动结转 Schema"""

from decimal import Decimal
from typing import Dict, Optional
from pydantic import BaseModel, Field


class CarryForwardResponse(BaseModel):
    """期初结转结果

    source 为 none 时表单保持默认值
    """
    category_type: str
    trigger_key: Optional[str] = Field(None, description="结转维度组合键")
    field: str = Field(..., description="承接上期数值的字段")
    opening: Optional[Decimal] = Field(None, description="期初值，维度不完整时为空")
    source: str = Field(..., description="carried / none")
    resets: Dict[str, Decimal] = Field(default_factory=dict, description="新记录需清零的字段")
