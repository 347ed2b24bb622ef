"""Tool configuration model."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ConfigFileSpec(BaseModel):
    """A configuration file written next to an installed tool.

    Attributes:
        path: File path, relative to the tool directory or absolute
        content: File content (JSON for .json files, YAML otherwise)
    """

    path: str
    content: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ToolConfig(BaseModel):
    """Configuration for a single provisioned tool.

    Attributes:
        repository: GitHub repository in owner/name form
        version: Release tag to install (None = latest release)
        asset_pattern: Glob matched against asset names, {arch} is substituted
        arch_names: Canonical architecture to asset name token
        kind: How the asset is installed (binary, archive or package)
        executable: Executable file name (command name on PATH for packages)
        version_args: Arguments used to verify the installation
        install_command: Command registering a package, {path} is substituted
        apply_args: Arguments applying a document, {document} is substituted
        config_file: Optional configuration file to write after install
    """

    repository: str = Field(..., pattern=r"^[\w.-]+/[\w.-]+$")
    version: Optional[str] = None
    asset_pattern: str
    arch_names: Dict[str, str] = Field(
        default_factory=lambda: {"x64": "x64", "arm64": "arm64", "x86": "x86"}
    )
    kind: Literal["binary", "archive", "package"] = "binary"
    executable: str
    version_args: List[str] = Field(default_factory=lambda: ["--version"])
    install_command: Optional[List[str]] = None
    apply_args: List[str] = Field(default_factory=lambda: ["{document}"])
    config_file: Optional[ConfigFileSpec] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_install_command(self) -> "ToolConfig":
        if self.kind == "package" and not self.install_command:
            raise ValueError("install_command is required for package tools")
        return self
