"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.

Example:
    >>> from pattern_locator.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.locator.retry_timeout_ms)
    30000
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def deep_merge(base: dict, updates: dict) -> dict:
    """Recursively merge ``updates`` into ``base`` (in place) and return it."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class LocatorSettings(BaseModel):
    """
    Locator resolution settings.

    Attributes:
        enable: Resolve field names through pattern sets (False returns them as-is)
        default_pattern_set: Pattern set used when nothing else matches
        retry_timeout_ms: Total time budget for one resolution
        retry_interval_ms: Wait between probing passes
        page_mapping: URL pattern -> pattern set id
        pattern_paths: Files or directories holding pattern sets
        static_locators: Fully-qualified key -> literal selector
        variables: Extra placeholder variables available to templates
        label_eligible: Element types resolved through label indirection
    """
    enable: bool = True
    default_pattern_set: Optional[str] = None
    retry_timeout_ms: int = Field(default=30000, ge=0, le=600000)
    retry_interval_ms: int = Field(default=2000, ge=0, le=60000)
    page_mapping: Dict[str, str] = Field(default_factory=dict)
    pattern_paths: List[str] = Field(default_factory=list)
    static_locators: Dict[str, str] = Field(default_factory=dict)
    variables: Dict[str, str] = Field(default_factory=dict)
    label_eligible: List[str] = Field(default_factory=lambda: ["input", "select", "textarea"])

    @field_validator("label_eligible")
    @classmethod
    def normalize_label_eligible(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item.strip()]


class LoggingSettings(BaseModel):
    """
    Logging configuration.

    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.

    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with PATTERN_LOCATOR__)
    3. Config file (YAML)
    4. Default values

    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(locator=LocatorSettings(default_pattern_set="homePage"))
    """

    model_config = SettingsConfigDict(
        env_prefix="PATTERN_LOCATOR__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    locator: LocatorSettings = Field(default_factory=LocatorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = False

    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.

        Args:
            overrides: Dictionary of values to override

        Returns:
            New Settings instance with overrides applied
        """
        merged = deep_merge(self.model_dump(), overrides)
        return Settings(**merged)
