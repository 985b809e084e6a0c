from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from httpmetrics.utils.logger import LOG_FORMATS


class Settings(BaseSettings):
    """Configuration for the bundled demo server.

    The library itself takes everything as constructor arguments; these
    settings only drive ``httpmetrics.server`` and ``main.py``. Every field
    can be set through an ``HTTPMETRICS_``-prefixed environment variable or
    a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTPMETRICS_",
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ---------------------------------------------------------------------
    # Core runtime settings
    # ---------------------------------------------------------------------
    app_env: str = Field("local", description="Running environment: local / staging / prod")
    log_level: str = Field("INFO", description="Application log level (DEBUG, INFO …)")
    log_format: str = Field("console", description="pretty console vs json")

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------
    host: str = Field("0.0.0.0", description="Interface uvicorn binds to")
    port: int = Field(8000, description="Port uvicorn binds to")

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    subsystem: str = Field("http", description="Subsystem segment of every metric name")
    namespace: str = Field("", description="Optional prefix before the subsystem")
    metrics_path: str = Field("/metrics", description="Path the exposition endpoint is served on")
    size_timeout: float = Field(5.0, gt=0, description="Seconds to wait for request size measurement")

    # ----------------------- Validators / hooks ------------------------
    @field_validator("app_env")
    @classmethod
    def _validate_app_env(cls, v: str) -> str:
        allowed = {"local", "staging", "prod"}
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}, got '{v}'")
        return v

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {LOG_FORMATS}, got '{v}'")
        return v

    @field_validator("metrics_path")
    @classmethod
    def _validate_metrics_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"METRICS_PATH must start with '/', got '{v}'")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # noqa: D401
    """Return a singleton Settings instance (cached)."""

    return Settings()
