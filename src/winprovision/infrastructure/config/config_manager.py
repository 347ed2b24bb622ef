"""Configuration manager for loading and validating .provision.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from winprovision.domain.config import (
    AppConfig,
    HttpConfig,
    InstallConfig,
    RetryConfig,
    ToolConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".provision.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .provision.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .provision.yml file (searched from current directory)
    3. Environment variables (WINPROVISION_*, GITHUB_TOKEN)
    4. CLI arguments (handled by CLI layer)
    """

    ENV_OVERRIDES = {
        "WINPROVISION_INSTALL_ROOT": ("install", "root", str),
        "WINPROVISION_INSTALL_SCOPE": ("install", "scope", str),
        "WINPROVISION_DOWNLOAD_DIR": ("install", "download_dir", str),
        "WINPROVISION_RETRY_MAX_ATTEMPTS": ("retry", "max_attempts", int),
        "WINPROVISION_RETRY_BASE_DELAY": ("retry", "base_delay", float),
        "GITHUB_TOKEN": ("http", "token", str),
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .provision.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    @staticmethod
    def default_config() -> Dict[str, Any]:
        """Defaults as a plain dictionary, ready for merging"""
        return copy.deepcopy(AppConfig().model_dump())

    def _find_config_file(self) -> Optional[Path]:
        """Find .provision.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If the file cannot be read or parsed
            ValidationError: If configuration is invalid
        """
        config_dict = self.default_config()

        if self.config_path:
            if not self.config_path.exists():
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping at top level")
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)

        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied
        """
        for env_name, (section, key, cast) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            try:
                config.setdefault(section, {})[key] = cast(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_name}: {value!r}") from e
        return config

    def get_install_config(self) -> InstallConfig:
        """Get install configuration

        Returns:
            Install configuration model
        """
        return self.config.install

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration

        Returns:
            Retry configuration model
        """
        return self.config.retry

    def get_http_config(self) -> HttpConfig:
        """Get HTTP configuration

        Returns:
            HTTP configuration model
        """
        return self.config.http

    def get_tools(self) -> Dict[str, ToolConfig]:
        """Get all configured tools keyed by name"""
        return self.config.tools

    def get_tool_config(self, name: str) -> ToolConfig:
        """Get configuration of a single tool

        Raises:
            ValueError: If the tool is not configured
        """
        tools = self.config.tools
        if name not in tools:
            available = ", ".join(tools.keys())
            raise ValueError(f"Unknown tool: {name}. Available tools: {available}")
        return tools[name]

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.max_attempts" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config.model_dump()
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
