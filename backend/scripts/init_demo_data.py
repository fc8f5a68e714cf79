"""
演示数据初始化脚本
- 清空各台账表（保留表结构）
- 写入套件、游戏、西装、日常支出的演示记录
- 打印每个维度的自动结转结果
"""

import asyncio
import sys
import os
from decimal import Decimal

# 添加项目路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import SessionLocal
from app.db.init_db import ensure_tables_exist
from app.services.activity_logger import ActivityLogger
from app.services.balance import CategoryType
from app.services.carry_forward import CarryForwardResolver
from app.services.record_service import RecordService
from app.services.record_store import RecordStore


DEMO_RECORDS = [
    (CategoryType.KIT, {"item_name": "Pencils", "opening_balance": 10, "addins": 5, "takeouts": 3}),
    (CategoryType.KIT, {"item_name": "Notebooks", "opening_balance": 40, "addins": 0, "takeouts": 12}),
    (CategoryType.GAME, {"game_details": "Chess", "previous_stock": 4, "adding": 0, "sent": 10, "sent_by": "Ravi"}),
    (CategoryType.GAME, {"game_details": "Carrom", "previous_stock": 2, "adding": 3, "sent": 1}),
    (CategoryType.BLAZER, {"gender": "Male", "size": "M-L", "quantity": 20}),
    (CategoryType.BLAZER, {"gender": "Male", "size": "M-L", "quantity": -5}),
    (CategoryType.BLAZER, {"gender": "Male", "size": "M-L", "quantity": 3}),
    (CategoryType.BLAZER, {"gender": "Female", "size": "F-S", "quantity": 8}),
    (CategoryType.EXPENSE, {"expense_category": "Stationery", "fixed_amount": Decimal("1000"),
                            "previous_month_overspend": 0, "expenses": Decimal("1200")}),
]

CARRY_CHECKS = [
    (CategoryType.KIT, "Pencils"),
    (CategoryType.KIT, "NewWidget"),
    (CategoryType.GAME, "Chess"),
    (CategoryType.BLAZER, ("Male", "M-L")),
    (CategoryType.EXPENSE, "Stationery"),
]


async def clear_all_data(db: AsyncSession):
    """清除所有台账数据（保留表结构）"""
    print("🗑️  清除所有数据...")
    for table in ("activity_logs", "kits_inventory", "games_inventory", "blazer_inventory", "daily_expenses"):
        await db.execute(text(f"DELETE FROM {table}"))
        print(f"   ✓ 清除 {table}")
    await db.commit()


async def main():
    """主函数"""
    print("=" * 60)
    print("🚀 台账系统 - 演示数据初始化")
    print("=" * 60 + "\n")

    await ensure_tables_exist()

    async with SessionLocal() as db:
        try:
            await clear_all_data(db)

            service = RecordService(db, ActivityLogger(SessionLocal))
            for category_type, payload in DEMO_RECORDS:
                await service.create_record(category_type, payload)
            print(f"   ✓ 写入 {len(DEMO_RECORDS)} 条演示记录")
        except Exception as e:
            await db.rollback()
            print(f"\n❌ 初始化失败: {e}")
            raise

    print("\n📦 自动结转结果:")
    resolver = CarryForwardResolver(RecordStore(SessionLocal))
    for category_type, key in CARRY_CHECKS:
        result = await resolver.resolve_opening_value(category_type, key)
        print(f"   - {category_type.value:<8} {key!s:<18} {result.field_name} = {result.opening} ({result.source})")

    print("\n" + "=" * 60)
    print("✅ 演示数据初始化完成！")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
