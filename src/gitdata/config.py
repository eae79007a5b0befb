"""Configuration management for gitdata."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class ClientConfig(BaseModel):
    """Configuration for a gitdata client bound to one repository."""

    api_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    raw_url: str = Field(
        default="https://raw.github.com",
        description="Base URL used to build raw content links",
    )
    user: str = Field(default="", description="Repository owner")
    repo: str = Field(default="", description="Repository name")
    use_tree_cache: bool = Field(
        default=False, description="Memoize fetched and created trees"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @field_validator("api_url", "raw_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://: {v}")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @property
    def repo_path(self) -> str:
        """API path prefix of the configured repository."""
        if not self.user or not self.repo:
            raise ValueError("Both 'user' and 'repo' must be configured")
        return f"/repos/{self.user}/{self.repo}"


class ConfigManager:
    """Manages configuration loading and saving."""

    DEFAULT_CONFIG_PATH = Path(".gitdata/config.json")

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[ClientConfig] = None

    def load(self) -> ClientConfig:
        """Load configuration from file or create the default one."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = ClientConfig(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
        else:
            logger.debug(f"No config file at {self.config_path}, using defaults")
            self._config = ClientConfig()

        return self._config

    def save(self, config: Optional[ClientConfig] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(config.model_dump(), f, indent=2)
