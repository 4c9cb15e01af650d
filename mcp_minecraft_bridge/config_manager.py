"""
ConfigManager: centralized settings loader for the Minecraft bridge.

Implements a Singleton that loads configuration from YAML, validates it with
pydantic-settings (environment variables prefixed ``MCB_`` override the
file, nested with ``__``), caches the result with a TTL, and provides hot
reload via reload().
"""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .server.logging import get_logger


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class ServerConfig(BaseModel):
    """WebSocket endpoint Minecraft connects to."""

    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = Field(default=8001, ge=1, le=65535)


class CorrelationConfig(BaseModel):
    """Response waiting (seconds).

    Attributes:
        timeout: Identifier-correlated wait per command.
        poll_interval: Sleep between polls of the last-response slot.
        poll_timeout: Overall limit for a polled wait.
    """

    model_config = ConfigDict(extra="forbid")

    timeout: float = Field(default=10.0, gt=0)
    poll_interval: float = Field(default=0.1, gt=0)
    poll_timeout: float = Field(default=5.0, gt=0)


class BatchSettings(BaseModel):
    """Chunking and pacing for block batches."""

    model_config = ConfigDict(extra="forbid")

    chunk_size: int = Field(default=50, ge=1)
    pace_every: int = Field(default=10, ge=1)
    pace_delay: float = Field(default=0.005, ge=0)
    chunk_delay: float = Field(default=0.02, ge=0)
    progress_threshold: int = Field(default=100, ge=0)


class SequenceConfig(BaseModel):
    """Retry budget for multi-step sequences."""

    model_config = ConfigDict(extra="forbid")

    retry_count: int = Field(default=3, ge=0, le=10)
    retry_delay: float = Field(default=0.5, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration for the app."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    file: Optional[Path] = None


class Settings(BaseSettings):
    """Top-level configuration; environment wins over YAML values."""

    model_config = SettingsConfigDict(
        env_prefix="MCB_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    correlation: CorrelationConfig = Field(default_factory=CorrelationConfig)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    sequence: SequenceConfig = Field(default_factory=SequenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # YAML arrives as init kwargs; put env first so it overrides the file
        return env_settings, init_settings, dotenv_settings, file_secret_settings


# ---------------------------------------------------------------------------
# ConfigManager (Singleton with TTL cache and hot reload)
# ---------------------------------------------------------------------------


class ConfigManager:
    """Singleton manager for application configuration.

    Responsibilities:
    - Locate and load YAML configuration (config/settings.yaml),
    - Validate structure and apply MCB_* environment overrides,
    - Cache config with TTL to avoid frequent disk IO,
    - Support hot reload via reload().

    ``MCB_CONFIG_FILE`` points at an explicit YAML file.
    """

    _instance: Optional["ConfigManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ConfigManager":
        with cls._lock:
            if cls._instance is None:
                inst = super().__new__(cls)
                inst._initialized = False
                cls._instance = inst
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._logger = get_logger("config_manager")
        self._repo_root: Path = Path(__file__).resolve().parents[1]
        self._cache_ttl_seconds: int = 60
        self._cache_timestamp: float = 0.0
        self._cached_settings: Optional[Settings] = None
        self._initialized = True

    # ------------------------------ Public API ------------------------------

    def get(self) -> Settings:
        """Return current settings, reloading if TTL expired.

        Returns:
            Settings: Validated and possibly overridden configuration.
        """

        now = time.time()
        if self._cached_settings and (now - self._cache_timestamp) < self._cache_ttl_seconds:
            return self._cached_settings

        settings = self._load_and_validate()
        self._cached_settings = settings
        self._cache_timestamp = now
        return settings

    def reload(self) -> Settings:
        """Force a reload of the configuration.

        Returns:
            Settings: Freshly loaded configuration.
        """

        self._logger.info("Reloading configuration from disk and environment overrides.")
        self._cache_timestamp = 0.0
        self._cached_settings = None
        return self.get()

    def config_file(self) -> Path:
        """Path of the YAML file that is (or would be) read."""

        explicit = os.getenv("MCB_CONFIG_FILE")
        return Path(explicit) if explicit else self._repo_root / "config" / "settings.yaml"

    # ----------------------------- Helper methods ---------------------------

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            self._logger.warning("Config file not found at %s; using defaults.", path)
            return {}
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self._logger.warning("Could not read %s (%s); using defaults.", path, e)
            return {}
        if not isinstance(data, dict):
            self._logger.warning("Config root in %s is not a mapping; using defaults.", path)
            return {}
        return data

    def _load_and_validate(self) -> Settings:
        path = self.config_file()
        data = self._read_yaml(path)
        try:
            return Settings(**data)
        except ValidationError as e:
            self._logger.warning("Invalid configuration in %s; using defaults. Details: %s", path, e)
            return Settings()
