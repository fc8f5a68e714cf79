"""游戏器材库存模型"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, DECIMAL
from app.db.base import Base


class GameRecord(Base):
    """游戏器材登记 - 在库 = 上期库存 + 新增 - 发出"""
    __tablename__ = "games_inventory"

    id = Column(Integer, primary_key=True, index=True)

    # 结转维度：游戏名称
    game_details = Column(String(100), nullable=False, index=True, comment="游戏名称")

    previous_stock = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="上期库存")
    adding = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="新增")
    sent = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="发出")

    # 派生字段
    in_stock = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="在库数量")

    sent_by = Column(String(100), comment="经手人")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<GameRecord {self.game_details} = {self.in_stock}>"
