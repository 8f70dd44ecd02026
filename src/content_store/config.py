"""Unified configuration loaded from .content-store.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".content-store.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "content-store" / "config.toml"

DEFAULT_LOCALES = [
    "en", "ar", "az", "be", "bg", "bn", "cs", "cy", "de", "dr", "el",
    "es", "es-419", "et", "fa", "fr", "he", "hi", "hu", "hy", "id", "it",
    "ja", "ka", "ko", "lt", "lv", "ms", "pl", "ps", "pt", "ro", "ru",
    "si", "sk", "so", "sq", "sr", "sw", "ta", "th", "tk", "tr", "uk",
    "ur", "uz", "vi", "zh", "zh-hk", "zh-tw",
]


class StoreConfig(BaseModel):
    """[store] section."""

    directory: str = "./data"


class RouterConfig(BaseModel):
    """[router] section."""

    url: str = ""
    backend_domain: str = "dev.gov.uk"
    timeout: int = 10

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def backend_url(self, app: str) -> str:
        """Base URL the routing tier should forward *app*'s traffic to."""
        return f"http://{app}.{self.backend_domain}/"


class NotificationConfig(BaseModel):
    """[notifications] section."""

    url: str = ""
    enabled: bool = True
    timeout: int = 10

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.url)


class CacheConfig(BaseModel):
    """[cache] section — TTLs in seconds."""

    default_ttl: int = 1800
    minimum_ttl: int = 5

    @property
    def default_ttl_delta(self) -> timedelta:
        return timedelta(seconds=self.default_ttl)

    @property
    def minimum_ttl_delta(self) -> timedelta:
        return timedelta(seconds=self.minimum_ttl)


class LocaleConfig(BaseModel):
    """[locales] section."""

    default: str = "en"
    available: list[str] = Field(default_factory=lambda: list(DEFAULT_LOCALES))


class APIConfig(BaseModel):
    """[api] section — hosts used to build URLs for linked items."""

    base_url: str = "http://content-store.dev.gov.uk"
    website_root: str = "https://www.gov.uk"


class ContentStoreConfig(BaseModel):
    """Top-level configuration model for the content store."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    router: RouterConfig = Field(default_factory=RouterConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    locales: LocaleConfig = Field(default_factory=LocaleConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @property
    def store_directory(self) -> Path:
        return Path(self.store.directory)


def load_config(path: str | Path | None = None) -> ContentStoreConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .content-store.toml in CWD
    3. ~/.config/content-store/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged ContentStoreConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = ContentStoreConfig.model_validate(data) if data else ContentStoreConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: ContentStoreConfig, **cli_kwargs: object) -> ContentStoreConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_directory": ("store", "directory"),
        "router_url": ("router", "url"),
        "notify_url": ("notifications", "url"),
        "default_ttl": ("cache", "default_ttl"),
        "minimum_ttl": ("cache", "minimum_ttl"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return ContentStoreConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: ContentStoreConfig) -> ContentStoreConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "CONTENT_STORE_DIR": ("store", "directory"),
        "ROUTER_API_URL": ("router", "url"),
        "ROUTER_BACKEND_DOMAIN": ("router", "backend_domain"),
        "CONTENT_STORE_NOTIFY_URL": ("notifications", "url"),
        "DEFAULT_LOCALE": ("locales", "default"),
        "CONTENT_STORE_API_URL": ("api", "base_url"),
        "WEBSITE_ROOT": ("api", "website_root"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    # TTLs are integers
    for env_var, field in [("DEFAULT_TTL", "default_ttl"), ("MINIMUM_TTL", "minimum_ttl")]:
        raw = os.environ.get(env_var)
        if raw is not None:
            try:
                data["cache"][field] = int(raw)
            except ValueError:
                logger.warning("Ignoring non-integer %s=%r", env_var, raw)

    return ContentStoreConfig.model_validate(data)
