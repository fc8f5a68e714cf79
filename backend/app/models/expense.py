"""
日常支出模型
余额 = 固定额度 + 上月结余 - 支出
上月结余可为负数（上月超支会抵减本月可用额度）
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Date, DateTime, DECIMAL, Text
from app.db.base import Base


class ExpenseRecord(Base):
    """日常支出登记"""
    __tablename__ = "daily_expenses"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, comment="支出日期")

    # 结转维度：支出类别
    expense_category = Column(String(100), nullable=False, index=True, comment="支出类别")

    fixed_amount = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="固定额度")
    previous_month_overspend = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="上月结余")
    expenses = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="支出")

    # 派生字段
    remaining_balance = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="余额")

    remarks = Column(Text, comment="备注")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<ExpenseRecord {self.expense_category} = {self.remaining_balance}>"

    @property
    def is_overspent(self) -> bool:
        """是否超支"""
        return (self.remaining_balance or Decimal("0")) < 0
