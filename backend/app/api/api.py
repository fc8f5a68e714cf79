"""API 路由聚合 - 单机版（无认证）"""
from fastapi import APIRouter

from app.api.endpoints import (
    kits, games, blazers, expenses, carry_forward, activity_logs, statistics
)

api_router = APIRouter()

# 台账模块
api_router.include_router(kits.router, prefix="/kits", tags=["套件库存"])
api_router.include_router(games.router, prefix="/games", tags=["游戏器材"])
api_router.include_router(blazers.router, prefix="/blazers", tags=["西装库存"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["日常支出"])

# 自动结转
api_router.include_router(carry_forward.router, prefix="/carry-forward", tags=["自动结转"])

# 系统
api_router.include_router(statistics.router, prefix="/stats", tags=["统计"])
api_router.include_router(activity_logs.router, prefix="/activity-logs", tags=["操作日志"])
