"""Install location configuration model."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class InstallConfig(BaseModel):
    """Configuration for where tools are installed.

    Attributes:
        root: Install root directory (None = derived from scope)
        scope: Install scope (auto = machine when elevated, user otherwise)
        download_dir: Directory for downloaded assets (None = system temp dir)
    """

    root: Optional[str] = None
    scope: Literal["auto", "user", "machine"] = "auto"
    download_dir: Optional[str] = None

    model_config = ConfigDict(extra="forbid")
