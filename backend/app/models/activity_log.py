"""
操作日志模型 - 记录各模块记录的增删改
用于审计追踪和问题排查
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.dialects.sqlite import JSON
from app.db.base import Base


MODULE_NAMES = {
    "kits_inventory": "Kits Inventory",
    "games_inventory": "Games Inventory",
    "blazer_inventory": "Blazer Inventory",
    "daily_expenses": "Daily Expenses",
}


class ActivityLog(Base):
    """操作日志 - 审计追踪

    action 取值：
    - create / update / delete: 操作成功
    - create_error / update_error / delete_error: 操作失败
    """
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)

    # 模块（即表名）
    module_type = Column(String(50), nullable=False, index=True, comment="模块")

    action = Column(String(30), nullable=False, index=True, comment="操作类型")

    record_id = Column(Integer, index=True, comment="记录ID")

    # 操作摘要
    description = Column(String(500), comment="操作描述")

    old_value = Column(JSON, comment="修改前")
    new_value = Column(JSON, comment="修改后")
    error_details = Column(JSON, comment="错误信息")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<ActivityLog {self.action} {self.module_type}:{self.record_id}>"

    @property
    def module_name(self) -> str:
        """模块显示名称"""
        return MODULE_NAMES.get(self.module_type, self.module_type)

    @property
    def is_error(self) -> bool:
        return self.action.endswith("_error")
