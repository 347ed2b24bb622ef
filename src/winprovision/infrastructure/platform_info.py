"""Host platform detection: architecture, elevation and install locations"""

import logging
import os
import platform
import sys
from pathlib import Path
from typing import Mapping, Optional

from winprovision.domain.config.install import InstallConfig
from winprovision.domain.errors import UnsupportedArchitectureError
from winprovision.domain.models.platform import Architecture, InstallScope

logger = logging.getLogger(__name__)

APP_DIR_NAME = "winprovision"

_ARCH_ALIASES = {
    "amd64": Architecture.X64,
    "x86_64": Architecture.X64,
    "x64": Architecture.X64,
    "em64t": Architecture.X64,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
    "armv8": Architecture.ARM64,
    "x86": Architecture.X86,
    "i386": Architecture.X86,
    "i686": Architecture.X86,
}


def detect_architecture(
    machine: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Architecture:
    """Detect the host CPU architecture

    A 32-bit process on 64-bit Windows reports x86 in PROCESSOR_ARCHITECTURE,
    the host architecture is in PROCESSOR_ARCHITEW6432.

    Args:
        machine: Machine string to map (skips environment lookup when given)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Canonical architecture

    Raises:
        UnsupportedArchitectureError: If the machine string is not recognised
    """
    if machine is None:
        env = os.environ if environ is None else environ
        machine = (
            env.get("PROCESSOR_ARCHITEW6432")
            or env.get("PROCESSOR_ARCHITECTURE")
            or platform.machine()
        )

    arch = _ARCH_ALIASES.get((machine or "").strip().lower())
    if arch is None:
        raise UnsupportedArchitectureError(machine or "")
    logger.debug(f"Detected architecture {arch.value} (machine: {machine})")
    return arch


def is_elevated() -> bool:
    """Check whether the current process runs with administrative rights"""
    if sys.platform == "win32":
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def resolve_scope(setting: str, elevated: bool) -> InstallScope:
    """Turn a configured scope (auto/user/machine) into a concrete scope"""
    if setting == "auto":
        return InstallScope.MACHINE if elevated else InstallScope.USER
    return InstallScope(setting)


def resolve_install_root(
    install_config: InstallConfig,
    scope: InstallScope,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Resolve the directory tools are installed under

    Args:
        install_config: Install configuration (an explicit root wins)
        scope: Resolved install scope
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Install root path
    """
    if install_config.root:
        return Path(install_config.root).expanduser()

    env = os.environ if environ is None else environ
    if scope == InstallScope.MACHINE:
        base = env.get("ProgramFiles") or env.get("PROGRAMFILES")
        if base:
            return Path(base) / APP_DIR_NAME
        return Path("/opt") / APP_DIR_NAME

    base = env.get("LOCALAPPDATA")
    if base:
        return Path(base) / "Programs" / APP_DIR_NAME
    return Path.home() / ".local" / "share" / APP_DIR_NAME
