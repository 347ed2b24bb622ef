"""HTTP configuration model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HttpConfig(BaseModel):
    """Configuration for release feed access.

    Attributes:
        timeout: Request timeout in seconds
        api_url: Base URL of the GitHub REST API
        token: GitHub token (GITHUB_TOKEN is applied by the config loader)
        user_agent: User-Agent header sent with every request
    """

    timeout: float = Field(60.0, gt=0.0)
    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    user_agent: str = "winprovision"

    model_config = ConfigDict(extra="forbid")
