from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./invoicedesk.db"

    # Database Connection Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes

    # App Settings
    APP_NAME: str = "InvoiceDesk"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # PDF rendering
    PDF_CURRENCY_FALLBACK_LABEL: str = "Rs."  # Used when the symbol can't be drawn with base-14 fonts
    PDF_DEFAULT_PLACE_OF_SUPPLY: str = "09-Uttar Pradesh"
    # Display-only split of the invoice tax: [[label, share], ...], shares sum to 1
    TAX_SPLIT_COMPONENTS: list[tuple[str, float]] = [("SGST", 0.5), ("CGST", 0.5)]

    # Render jobs
    RENDER_JOB_TTL_MINUTES: int = 30
    RENDER_JOB_PURGE_INTERVAL_MINUTES: int = 10
    SCHEDULER_ENABLED: bool = True

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('TAX_SPLIT_COMPONENTS', mode='before')
    @classmethod
    def parse_tax_split(cls, v):
        if isinstance(v, str):
            v = json.loads(v)
        return v

    @field_validator('TAX_SPLIT_COMPONENTS')
    @classmethod
    def check_tax_split(cls, v):
        if not v:
            raise ValueError("TAX_SPLIT_COMPONENTS needs at least one component")
        if abs(sum(share for _, share in v) - 1.0) > 1e-9:
            raise ValueError("TAX_SPLIT_COMPONENTS shares must sum to 1")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
