"""Provisioning error hierarchy"""

from typing import List, Optional


class ProvisioningError(Exception):
    """Base class for provisioning failures"""


class UnsupportedArchitectureError(ProvisioningError):
    """Raised when the host architecture has no known mapping"""

    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(f"Unsupported architecture: {machine!r}")


class AssetNotFoundError(ProvisioningError):
    """Raised when no release asset matches the configured pattern"""

    def __init__(self, pattern: str, tag: str, available: List[str]):
        self.pattern = pattern
        self.tag = tag
        self.available = available
        names = ", ".join(available) if available else "<none>"
        super().__init__(f"No asset matching {pattern!r} in release {tag}. Available: {names}")


class InstallError(ProvisioningError):
    """Raised when a tool cannot be installed or verified"""


class ToolInvocationError(ProvisioningError):
    """Raised when a tool process fails or cannot be started"""

    def __init__(self, args: List[str], exit_code: Optional[int], output: str = ""):
        self.command = list(args)
        self.exit_code = exit_code
        self.output = output
        if exit_code is None:
            message = f"Failed to run {args[0] if args else '<empty command>'}"
        else:
            message = f"Command {' '.join(args)} exited with code {exit_code}"
        if output:
            message = f"{message}: {output.strip()}"
        super().__init__(message)
