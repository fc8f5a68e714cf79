"""统计 Schema"""

from typing import List
from pydantic import BaseModel


class ModuleStat(BaseModel):
    """单个模块统计"""
    module_type: str
    module_name: str = ""
    total_records: int = 0
    todays_entries: int = 0


class DashboardStats(BaseModel):
    """首页统计"""
    total_records: int = 0
    todays_entries: int = 0
    active_modules: int = 0
    modules: List[ModuleStat] = []
