from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field


class EnvSettings(BaseSettings):
    config_path: str = Field("settings.yaml", alias="CHECKAUTH_CONFIG")
    host: str = Field("0.0.0.0", alias="CHECKAUTH_HOST")
    port: int = Field(5000, alias="CHECKAUTH_PORT")
    static_dir: str = Field(".", alias="CHECKAUTH_STATIC_DIR")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_dir: str = Field("data/logs", alias="LOG_DIR")
    log_retention_days: int = Field(30, alias="LOG_RETENTION_DAYS")

    class Config:
        populate_by_name = True


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()
