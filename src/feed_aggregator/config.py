"""
Configuration management for the feed aggregator.

Uses Pydantic for validation and pydantic-settings for environment variable support.
"""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACCEPT = (
    "application/rss+xml, application/atom+xml, application/xml;q=0.9, "
    "text/xml;q=0.8, */*;q=0.5"
)


class FetcherConfig(BaseSettings):
    """Remote feed fetcher configuration."""

    model_config = SettingsConfigDict(env_prefix="FETCHER_")

    # HTTP settings
    timeout_ms: int = Field(default=8000, ge=1, le=300_000, description="Per-source fetch timeout")
    user_agent: str = Field(default="feed-aggregator/0.1", description="User-Agent header")
    accept: str = Field(default=DEFAULT_ACCEPT, description="Accept header sent with every fetch")

    # Scheduling
    concurrency: int = Field(default=6, ge=1, le=100, description="Maximum sources fetched at once")

    # Follow redirects
    follow_redirects: bool = Field(default=True)
    max_redirects: int = Field(default=5, ge=0, le=20)


class CacheConfig(BaseSettings):
    """Aggregated result cache configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    ttl_seconds: int = Field(default=900, ge=1, description="TTL of cached group results")
    default_limit: int = Field(default=100, ge=1, description="Item limit when none is requested")
    max_age_cap_seconds: int = Field(
        default=60, ge=0, description="Upper bound for the Cache-Control max-age"
    )


class SchedulerConfig(BaseSettings):
    """Prewarm scheduler configuration."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    enabled: bool = Field(default=True, description="Enable scheduler")
    timezone: str = Field(default="UTC", description="Scheduler timezone")
    interval_minutes: int = Field(default=15, ge=1, description="Prewarm interval")
    prewarm_limit: int = Field(default=100, ge=1, description="Item limit used when prewarming")
    max_workers: int = Field(default=1, ge=1, le=20, description="Maximum concurrent workers")


class StorageConfig(BaseSettings):
    """Key-value store configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    type: str = Field(default="memory", description="Store type: memory, sqlite")
    path: str = Field(default="data/feed_aggregator.db", description="Database file path (SQLite)")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate store type."""
        v = v.lower().strip()
        valid_types = ["memory", "sqlite"]
        if v not in valid_types:
            raise ValueError(f"Invalid store type: {v!r}. Must be one of {valid_types}")
        return v


class GroupsConfig(BaseSettings):
    """Group source configuration."""

    model_config = SettingsConfigDict(env_prefix="GROUPS_")

    inline_json: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("inline_json", "GROUPS_JSON"),
        description="Inline group config JSON (fallback)",
    )
    config_url: Optional[str] = Field(default=None, description="Remote group config document")


class WebConfig(BaseSettings):
    """Web API configuration."""

    model_config = SettingsConfigDict(env_prefix="WEB_")

    host: str = Field(default="127.0.0.1", description="Web server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Web server port")
    debug: bool = Field(default=False, description="Debug mode")
    admin_token: Optional[str] = Field(default=None, description="Token for admin endpoints")
    cors_allow_origin: str = Field(default="*", description="Access-Control-Allow-Origin value")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        description="Log format"
    )

    # File logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_path: str = Field(default="logs/feed_aggregator.log", description="Log file path")
    rotation: str = Field(default="100 MB", description="Log rotation size")
    retention: str = Field(default="30 days", description="Log retention period")

    # Console logging
    console_enabled: bool = Field(default=True, description="Enable console logging")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AGG_",
        case_sensitive=False,
    )

    # Application
    app_name: str = Field(default="feed-aggregator", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-configurations
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    groups: GroupsConfig = Field(default_factory=GroupsConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


_SECTIONS = {
    "fetcher": FetcherConfig,
    "cache": CacheConfig,
    "scheduler": SchedulerConfig,
    "storage": StorageConfig,
    "groups": GroupsConfig,
    "web": WebConfig,
    "logging": LoggingConfig,
}

# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def load_config_from_yaml(yaml_path: str) -> Config:
    """Load configuration from a YAML file.

    Values loaded from YAML take precedence over environment variables for the
    keys they set; unset keys still come from the environment.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        Config instance loaded from the file.
    """
    import yaml

    yaml_file = Path(yaml_path)
    if not yaml_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    with yaml_file.open("r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    main_config = {}
    for key, value in config_dict.items():
        if key in _SECTIONS:
            main_config[key] = _SECTIONS[key](**(value or {}))
        else:
            main_config[key] = value

    return Config(**main_config)


def reload_config() -> Config:
    """Reload configuration from environment and YAML files."""
    global _config
    _config = None

    config_yaml = Path("config/config.yaml")
    if config_yaml.exists():
        _config = load_config_from_yaml(str(config_yaml))
    else:
        _config = Config()

    return _config
