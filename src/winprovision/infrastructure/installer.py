"""Installing downloaded assets into the install root"""

from __future__ import annotations

import json
import logging
import shutil
import uuid
import zipfile
from pathlib import Path
from typing import Callable, Optional

import yaml

from winprovision.domain.config.tool import ToolConfig
from winprovision.domain.errors import InstallError, ToolInvocationError
from winprovision.infrastructure.process import CommandResult, run_command

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]


class ToolInstaller:
    """Places tools under <install_root>/<tool name> and checks them"""

    def __init__(self, install_root: Path, runner: Runner = run_command, timeout: float = 600):
        """Initialize installer

        Args:
            install_root: Directory holding one sub-directory per tool
            runner: Function used to run processes
            timeout: Seconds allowed for install and verify commands
        """
        self.install_root = Path(install_root)
        self.runner = runner
        self.timeout = timeout

    def tool_dir(self, name: str) -> Path:
        return self.install_root / name

    def find_executable(self, name: str, tool: ToolConfig) -> Optional[Path]:
        """Locate an installed tool

        Returns:
            Path to the executable or None if the tool is not installed
        """
        candidate = self.tool_dir(name) / tool.executable
        if candidate.is_file():
            return candidate
        if tool.kind == "package":
            found = shutil.which(tool.executable)
            if found:
                return Path(found)
        return None

    def install(self, name: str, tool: ToolConfig, asset_path: Path) -> Path:
        """Install a downloaded asset

        Args:
            name: Tool name
            tool: Tool configuration
            asset_path: Downloaded release asset

        Returns:
            Path of the installed executable (or the registered package file)

        Raises:
            InstallError: If installation fails
        """
        asset_path = Path(asset_path)
        if not asset_path.is_file():
            raise InstallError(f"{name}: asset {asset_path} does not exist")

        target_dir = self.tool_dir(name)
        logger.info(f"Installing {name} ({tool.kind}) from {asset_path.name} into {target_dir}")

        if tool.kind == "binary":
            return self._install_binary(name, tool, asset_path, target_dir)
        if tool.kind == "archive":
            return self._install_archive(name, tool, asset_path, target_dir)
        return self._install_package(name, tool, asset_path)

    def _install_binary(self, name: str, tool: ToolConfig, asset_path: Path, target_dir: Path) -> Path:
        target = target_dir / tool.executable
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(asset_path, target)
            target.chmod(target.stat().st_mode | 0o111)
        except OSError as e:
            raise InstallError(f"{name}: failed to copy {asset_path} to {target}: {e}") from e
        return target

    def _install_archive(self, name: str, tool: ToolConfig, asset_path: Path, target_dir: Path) -> Path:
        try:
            with zipfile.ZipFile(asset_path) as archive:
                members = archive.namelist()
                root = target_dir.resolve()
                for member in members:
                    dest = (target_dir / member).resolve()
                    if dest != root and root not in dest.parents:
                        raise InstallError(f"{name}: archive entry {member!r} escapes {target_dir}")
                if target_dir.exists():
                    shutil.rmtree(target_dir)
                target_dir.mkdir(parents=True)
                archive.extractall(target_dir)
            self._flatten_single_folder(target_dir)
        except zipfile.BadZipFile as e:
            raise InstallError(f"{name}: {asset_path.name} is not a valid zip archive") from e
        except OSError as e:
            raise InstallError(f"{name}: failed to extract {asset_path.name}: {e}") from e

        executable = target_dir / tool.executable
        if not executable.is_file():
            raise InstallError(f"{name}: {tool.executable} not found in {asset_path.name}")
        return executable

    @staticmethod
    def _flatten_single_folder(target_dir: Path) -> None:
        """Move the contents of a lone top-level folder up one level"""
        entries = list(target_dir.iterdir())
        if len(entries) != 1 or not entries[0].is_dir():
            return
        # a child may share the folder name
        inner = entries[0].rename(target_dir / f".{entries[0].name}-{uuid.uuid4().hex[:8]}")
        for child in list(inner.iterdir()):
            shutil.move(str(child), str(target_dir / child.name))
        inner.rmdir()

    def _install_package(self, name: str, tool: ToolConfig, asset_path: Path) -> Path:
        command = [part.replace("{path}", str(asset_path)) for part in tool.install_command or []]
        try:
            self.runner(command, timeout=self.timeout)
        except ToolInvocationError as e:
            raise InstallError(f"{name}: package registration failed: {e}") from e
        return asset_path

    def write_config_file(self, name: str, tool: ToolConfig) -> Optional[Path]:
        """Write the tool's configuration file, if it has one

        Returns:
            Path written or None
        """
        spec = tool.config_file
        if spec is None:
            return None

        path = Path(spec.path)
        if not path.is_absolute():
            path = self.tool_dir(name) / path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    json.dump(spec.content, f, indent=2)
                    f.write("\n")
                else:
                    yaml.safe_dump(spec.content, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise InstallError(f"{name}: failed to write {path}: {e}") from e
        logger.info(f"Wrote {name} configuration to {path}")
        return path

    def verify(self, name: str, tool: ToolConfig) -> str:
        """Run the installed tool to check it works

        Returns:
            First line of the tool's version output

        Raises:
            InstallError: If the tool is missing or the check fails
        """
        executable = self.find_executable(name, tool)
        if executable is None:
            raise InstallError(f"{name}: {tool.executable} not found after install")
        try:
            result = self.runner([str(executable), *tool.version_args], timeout=self.timeout)
        except ToolInvocationError as e:
            raise InstallError(f"{name}: verification failed: {e}") from e

        for line in result.output.splitlines():
            if line.strip():
                return line.strip()
        return ""
