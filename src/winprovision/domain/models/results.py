"""Result models reported back to the operator"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ToolStatus:
    """Outcome of provisioning (or checking) a single tool"""

    name: str
    action: str  # present, installed, missing
    path: Optional[str] = None
    version: Optional[str] = None
    release: Optional[str] = None  # Release tag installed from
    error: Optional[str] = None  # Error message if provisioning failed

    @property
    def is_successful(self) -> bool:
        """Check if provisioning was successful"""
        return self.error is None


@dataclass
class ApplyResult:
    """Outcome of applying a configuration document"""

    tool: str
    document: str
    exit_code: int
    output: str = ""
