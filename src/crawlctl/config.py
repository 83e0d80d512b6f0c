from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from pddikti_client import DEFAULT_BASE_URL


class Settings(BaseSettings):
    INPUT_PATH: str = "result.json"
    OUTPUT_PATH: str = "univResult.json"
    DLQ_PATH: Optional[str] = None
    INSTITUTIONS_CSV: str = "daftar_pt.csv"
    RESOLVED_PATH: Optional[str] = None
    PDDIKTI_BASE_URL: str = DEFAULT_BASE_URL
    PDDIKTI_TIMEOUT_SEC: float = 30.0
    METRICS_PORT: Optional[int] = None
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
