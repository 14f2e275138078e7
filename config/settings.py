"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Rule tables (banned terms, keyword dictionary, ...) are NOT settings;
they live in the workbook's Config sheet and are parsed by
parsers.config_parser.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.
    
    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """
    
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )
    
    # ===================
    # WORKBOOK LAYOUT
    # ===================
    input_sheet: str = Field(
        default="Input",
        description="Sheet holding the raw product export"
    )
    output_sheet: str = Field(
        default="Output",
        description="Sheet receiving the cleaned (or untouched) rows"
    )
    issues_sheet: str = Field(
        default="Issues",
        description="Sheet receiving the issue log"
    )
    config_sheet: str = Field(
        default="Config",
        description="Sheet holding key / JSON rule tables"
    )
    summary_sheet: str = Field(
        default="Summary",
        description="Sheet receiving the run summary report"
    )
    
    # ===================
    # RUN CONTROL
    # ===================
    lock_timeout_seconds: float = Field(
        default=1.0,
        gt=0,
        le=30,
        description="How long to wait for the dataset lock before aborting"
    )
    lock_dir: Optional[str] = Field(
        None,
        description="Directory for lock files (defaults to the dataset's directory)"
    )
    progress_batch_size: int = Field(
        default=50,
        ge=1,
        le=10000,
        description="Log progress after every N records"
    )
    
    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    
    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.
    
    Returns:
        Settings: Application settings
        
    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
