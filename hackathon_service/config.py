from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    metrics_namespace: str = Field(default="hackathon", alias="METRICS_NAMESPACE")
    app_label: str = Field(default="hackathon-service", alias="APP_LABEL")
    enable_default_metrics: bool = Field(default=True, alias="ENABLE_DEFAULT_METRICS")

    cpu_spike_slice_ms: int = Field(default=10, alias="CPU_SPIKE_SLICE_MS")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
