"""
西装库存模型 - 按 性别 + 尺码 登记收发
quantity 为带符号数量：正数为收入，负数为发出
in_office_stock 为该性别尺码截至本条记录的累计在库（全历史 added - sent 之和）
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, DECIMAL, Text, Index
from app.db.base import Base


BLAZER_GENDERS = ("Male", "Female")

BLAZER_SIZES = (
    "F-XS", "F-S", "F-M", "F-L", "F-XL", "F-XXL",
    "M-XS", "M-S", "M-M", "M-L", "M-XL", "M-XXL",
)


class BlazerRecord(Base):
    """西装收发登记"""
    __tablename__ = "blazer_inventory"

    __table_args__ = (
        Index("ix_blazer_gender_size", "gender", "size"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # 结转维度：性别 + 尺码
    gender = Column(String(10), nullable=False, comment="性别")
    size = Column(String(10), nullable=False, comment="尺码")

    quantity = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="数量（带符号）")
    added = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="收入")
    sent = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="发出")

    # 派生字段
    in_office_stock = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="在库累计")

    remarks = Column(Text, comment="备注")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<BlazerRecord {self.gender}/{self.size} {self.quantity:+} = {self.in_office_stock}>"

    @property
    def display_size(self) -> str:
        """去掉 F-/M- 前缀的尺码"""
        return (self.size or "").replace("F-", "").replace("M-", "")
