from typing import List, Union
import logging

from pydantic import AnyHttpUrl, Field, validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    PROJECT_NAME: str = "库存与物资台账系统"
    API_STR: str = "/api"

    # CORS配置
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000"
    ]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # 数据库配置
    SQLITE_DATABASE_URI: str = "sqlite:///./inventory_tracker.db"

    # 自动结转配置
    AUTO_CARRY_DEBOUNCE_MS: int = Field(default=250, ge=0, description="自动结转防抖间隔（毫秒）")
    AUTO_CARRY_LOOKUP_TIMEOUT: float = Field(default=5.0, gt=0, description="上期记录查询超时（秒）")

    # 日志目录
    LOG_DIR: str = "logs"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
logger.info(f"加载配置: API_STR={settings.API_STR}, CORS={settings.BACKEND_CORS_ORIGINS}")
