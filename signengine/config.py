"""
Configuration module - loads settings from environment variables and .env.
"""
import json
import logging
from functools import lru_cache
from typing import Any, List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def parse_origins(value: Any) -> List[str]:
    """Parse origins from a JSON list, CSV, semicolon-separated string, or list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return []
        if s.startswith("["):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                pass  # Fall through to delimiter parsing
        parts = [p.strip() for p in s.replace(",", ";").split(";")]
        return [p for p in parts if p]
    return []


STORAGE_BACKENDS = ("local", "gcs")
AUDIT_BACKENDS = ("memory", "jsonl", "supabase")


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    app_base_url: str = Field(default="http://localhost:8000", alias="APP_BASE_URL")

    # Byte storage
    storage_backend: str = Field(default="local", alias="STORAGE_BACKEND")
    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")
    output_dir: str = Field(default="outputs", alias="OUTPUT_DIR")
    gcs_bucket: str = Field(default="", alias="GCS_BUCKET")
    gcs_originals_prefix: str = Field(default="uploads", alias="GCS_ORIGINALS_PREFIX")
    gcs_signed_prefix: str = Field(default="outputs", alias="GCS_SIGNED_PREFIX")
    max_upload_mb: int = Field(default=50, alias="MAX_UPLOAD_MB")

    # Audit storage
    audit_backend: str = Field(default="jsonl", alias="AUDIT_BACKEND")
    audit_log_path: str = Field(default="audit/audit_trail.jsonl", alias="AUDIT_LOG_PATH")
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_anon_key: str = Field(default="", alias="SUPABASE_ANON_KEY")
    audit_table: str = Field(default="audit_trail", alias="AUDIT_TABLE")

    # Field rendering
    default_font_size: float = Field(default=12.0, gt=0, alias="DEFAULT_FONT_SIZE")
    text_baseline_offset: float = Field(
        default=5.0,
        alias="TEXT_BASELINE_OFFSET",
        description="Points between the field box bottom edge and the text baseline",
    )
    date_format: str = Field(default="%m/%d/%Y", alias="DATE_FORMAT")

    # CORS (JSON list, CSV or semicolon-separated)
    allowed_origins_raw: str = Field(default="", alias="ALLOWED_ORIGINS")

    @field_validator("storage_backend")
    @classmethod
    def _check_storage_backend(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"Unsupported storage backend: {v}")
        return v

    @field_validator("audit_backend")
    @classmethod
    def _check_audit_backend(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in AUDIT_BACKENDS:
            raise ValueError(f"Unsupported audit backend: {v}")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Warn about backend settings that cannot work in this environment."""
        if self.storage_backend == "gcs" and not self.gcs_bucket:
            logger.error("STORAGE_BACKEND is 'gcs' but GCS_BUCKET is not set")

        if self.audit_backend == "supabase" and not (self.supabase_url and self.supabase_anon_key):
            logger.error("AUDIT_BACKEND is 'supabase' but SUPABASE_URL / SUPABASE_ANON_KEY are not set")

        if self.environment == "production":
            if self.audit_backend == "memory":
                logger.warning(
                    "Configuration Warning: AUDIT_BACKEND is 'memory' in production; "
                    "audit records will be lost on restart."
                )
            if not self.app_base_url.startswith("https://"):
                logger.warning(
                    f"Configuration Warning: APP_BASE_URL ('{self.app_base_url}') "
                    f"does not start with 'https://' in a '{self.environment}' environment."
                )

        return self

    @property
    def allowed_origins(self) -> List[str]:
        return parse_origins(self.allowed_origins_raw)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Development origins (only in non-production)
DEV_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]


def get_cors_origins() -> List[str]:
    """
    Get list of allowed CORS origins.

    Combines origins from ALLOWED_ORIGINS with the development origins
    when not running in production.
    """
    settings = get_settings()
    origins = set(settings.allowed_origins)

    if settings.environment != "production":
        origins.update(DEV_CORS_ORIGINS)

    return sorted(origins)
