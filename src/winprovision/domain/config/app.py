"""Main application configuration model."""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from winprovision.domain.config.http import HttpConfig
from winprovision.domain.config.install import InstallConfig
from winprovision.domain.config.retry import RetryConfig
from winprovision.domain.config.tool import ToolConfig


def default_tools() -> Dict[str, ToolConfig]:
    """Built-in tool definitions (dsc, bicep, winget)"""
    return {
        "dsc": ToolConfig(
            repository="PowerShell/DSC",
            asset_pattern="DSC-*-{arch}-pc-windows-msvc.zip",
            arch_names={"x64": "x86_64", "arm64": "aarch64"},
            kind="archive",
            executable="dsc.exe",
            apply_args=["config", "set", "--file", "{document}"],
        ),
        "bicep": ToolConfig(
            repository="Azure/bicep",
            asset_pattern="bicep-win-{arch}.exe",
            arch_names={"x64": "x64", "arm64": "arm64"},
            kind="binary",
            executable="bicep.exe",
            apply_args=["build", "{document}"],
        ),
        "winget": ToolConfig(
            repository="microsoft/winget-cli",
            asset_pattern="Microsoft.DesktopAppInstaller_*.msixbundle",
            arch_names={"x64": "x64", "arm64": "arm64", "x86": "x86"},
            kind="package",
            executable="winget.exe",
            install_command=[
                "powershell.exe",
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                "Add-AppxPackage -Path '{path}'",
            ],
            apply_args=[
                "configure",
                "--file",
                "{document}",
                "--accept-configuration-agreements",
                "--disable-interactivity",
            ],
        ),
    }


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        install: Install location configuration
        retry: Retry logic configuration
        http: Release feed access configuration
        tools: Provisioned tools keyed by name
    """

    install: InstallConfig = Field(default_factory=InstallConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    tools: Dict[str, ToolConfig] = Field(default_factory=default_tools)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "install": {
                    "root": "C:\\Tools",
                    "scope": "machine",
                },
                "retry": {
                    "max_attempts": 5,
                    "base_delay": 0.1,
                },
                "http": {
                    "timeout": 60,
                },
                "tools": {
                    "bicep": {
                        "repository": "Azure/bicep",
                        "version": "v0.30.3",
                        "asset_pattern": "bicep-win-{arch}.exe",
                        "executable": "bicep.exe",
                        "config_file": {
                            "path": "bicepconfig.json",
                            "content": {"analyzers": {"core": {"enabled": True}}},
                        },
                    },
                },
            }
        },
    )
