"""
套件库存模型 - 按物品名称逐期登记
期末余额 = 期初余额 + 入库 - 出库，由服务层计算写入，不作为数据来源
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Date, DateTime, DECIMAL, Text
from app.db.base import Base


class KitRecord(Base):
    """套件库存登记"""
    __tablename__ = "kits_inventory"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, comment="登记日期")

    # 结转维度：物品名称
    item_name = Column(String(100), nullable=False, index=True, comment="物品名称")

    opening_balance = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="期初余额")
    addins = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="入库")
    takeouts = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="出库")

    # 派生字段
    closing_balance = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="期末余额")

    remarks = Column(Text, comment="备注")

    # 审计字段
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<KitRecord {self.item_name} = {self.closing_balance}>"
