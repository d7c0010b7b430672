"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from hfn_discovery.core import TagMatch


@dataclass
class SearchConfig:
    """Search engine settings."""
    debounce_seconds: float = 0.3
    provider_timeout: float = 10.0
    tag_match: str = "any"
    recent_limit: int = 10
    page_size: int = 20


@dataclass
class StorageConfig:
    """Storage settings."""
    data_dir: Path = Path(".hfn")
    saved_items_file: str = "saved_items.yaml"
    saved_searches_file: str = "saved_searches.yaml"


@dataclass
class ProviderConfig:
    """Search provider settings."""
    kind: str = "demo"
    base_url: str = "http://localhost:5000"
    demo_latency: float = 0.0


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "console"


@dataclass
class Settings:
    """Application settings."""

    # API token (from environment only)
    api_token: Optional[str] = None

    # Config sections
    search: SearchConfig = field(default_factory=SearchConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def saved_items_path(self) -> Path:
        return self.storage.data_dir / self.storage.saved_items_file

    @property
    def saved_searches_path(self) -> Path:
        return self.storage.data_dir / self.storage.saved_searches_file

    @property
    def tag_match(self) -> TagMatch:
        return TagMatch(self.search.tag_match.lower())


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    # Load YAML config
    config = load_config(config_path)

    settings = Settings(api_token=os.getenv("HFN_API_TOKEN"))

    # Apply YAML config
    if "search" in config:
        for key, value in config["search"].items():
            setattr(settings.search, key, value)

    if "storage" in config:
        for key, value in config["storage"].items():
            setattr(settings.storage, key, Path(value) if key == "data_dir" else value)

    if "provider" in config:
        for key, value in config["provider"].items():
            setattr(settings.provider, key, value)

    if "logging" in config:
        for key, value in config["logging"].items():
            setattr(settings.logging, key, value)

    # Environment overrides
    if os.getenv("HFN_API_BASE_URL"):
        settings.provider.base_url = os.environ["HFN_API_BASE_URL"]
        settings.provider.kind = "http"

    if os.getenv("HFN_DATA_DIR"):
        settings.storage.data_dir = Path(os.environ["HFN_DATA_DIR"])

    if os.getenv("HFN_LOG_LEVEL"):
        settings.logging.level = os.environ["HFN_LOG_LEVEL"]

    return settings
