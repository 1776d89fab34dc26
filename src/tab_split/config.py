"""Configuration management for TabSplit."""

import logging
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

CustomSplitPolicy = Literal["net_owed", "subtotal"]


class Settings(BaseSettings):
    """Application settings, optionally overridden from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="TAB_SPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence
    database_path: Path = Path.home() / ".tab_split" / "tab_split.db"
    storage_key: str = "saved_tabs"

    # Outing defaults
    default_restaurant_name: str = "Group Outing"

    # How owes_amount is computed when the custom split is confirmed
    custom_split_policy: CustomSplitPolicy = "net_owed"

    # Deferred UI transitions
    settle_delay_seconds: float = 0.6
    toast_seconds: float = 1.5

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings(**overrides) -> Settings:
    """Load application settings from defaults, .env and environment variables."""
    try:
        return Settings(**overrides)
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check TAB_SPLIT_* environment variables "
            f"and your .env file.\n"
            f"Error: {e}"
        ) from e


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
