# models包初始化文件

from app.models.kit import KitRecord
from app.models.game import GameRecord
from app.models.blazer import BlazerRecord, BLAZER_GENDERS, BLAZER_SIZES
from app.models.expense import ExpenseRecord
from app.models.activity_log import ActivityLog, MODULE_NAMES

__all__ = [
    "KitRecord",
    "GameRecord",
    "BlazerRecord",
    "BLAZER_GENDERS",
    "BLAZER_SIZES",
    "ExpenseRecord",
    "ActivityLog",
    "MODULE_NAMES",
]
