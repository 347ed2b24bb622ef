"""Configuration models with Pydantic validation."""

from winprovision.domain.config.app import AppConfig, default_tools
from winprovision.domain.config.http import HttpConfig
from winprovision.domain.config.install import InstallConfig
from winprovision.domain.config.retry import RetryConfig
from winprovision.domain.config.tool import ConfigFileSpec, ToolConfig

__all__ = [
    "AppConfig",
    "ConfigFileSpec",
    "HttpConfig",
    "InstallConfig",
    "RetryConfig",
    "ToolConfig",
    "default_tools",
]
