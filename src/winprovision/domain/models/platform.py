"""Host platform enums"""

from enum import Enum


class Architecture(str, Enum):
    """Canonical CPU architecture names"""

    X64 = "x64"
    ARM64 = "arm64"
    X86 = "x86"


class InstallScope(str, Enum):
    """Who an installation is for"""

    USER = "user"
    MACHINE = "machine"
