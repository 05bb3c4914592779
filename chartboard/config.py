"""
Chartboard Configuration

All environment variables and settings for the dashboard chart API.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # APP
    # ==========================================================================
    app_name: str = "Chartboard"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # SUPABASE (chart metadata + source tables)
    # ==========================================================================
    supabase_url: str
    supabase_service_key: str

    # Metadata tables
    dashboard_table: str = "dashboard"
    chart_table: str = "chart"

    # ==========================================================================
    # DASHBOARD BEHAVIOR
    # ==========================================================================
    default_dashboard_name: str = "CompanyA"
    dashboard_timezone: str = "UTC"  # Clock used to resolve "today" per request
    # Merge only the missing sub-ranges into a chart's series instead of
    # replacing it wholesale on every stale detection
    chart_incremental_fetch: bool = True

    # ==========================================================================
    # CORS
    # ==========================================================================
    cors_origins: str = "*"

    # ==========================================================================
    # SERVER
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
