"""Domain models"""

from winprovision.domain.models.platform import Architecture, InstallScope
from winprovision.domain.models.release import Release, ReleaseAsset
from winprovision.domain.models.results import ApplyResult, ToolStatus

__all__ = [
    "ApplyResult",
    "Architecture",
    "InstallScope",
    "Release",
    "ReleaseAsset",
    "ToolStatus",
]
