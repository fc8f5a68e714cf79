"""操作日志 Schema"""

from datetime import datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel


class ActivityLogResponse(BaseModel):
    """日志响应"""
    id: int
    module_type: str
    action: str
    record_id: Optional[int]
    description: Optional[str]
    old_value: Optional[Dict[str, Any]]
    new_value: Optional[Dict[str, Any]]
    error_details: Optional[Dict[str, Any]]
    created_at: datetime

    # 显示字段
    module_name: str
    is_error: bool

    class Config:
        from_attributes = True


class ActivityLogListResponse(BaseModel):
    """日志列表响应"""
    data: List[ActivityLogResponse]
    total: int
    page: int
    limit: int
