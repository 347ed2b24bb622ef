"""Retry configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Configuration for retry logic around network calls.

    Attributes:
        max_attempts: Maximum number of executions, including the first one
        base_delay: Backoff scale in seconds
    """

    max_attempts: int = Field(5, gt=0, le=20)
    base_delay: float = Field(0.1, ge=0.0)  # Allow 0 for tests

    model_config = ConfigDict(extra="forbid")
