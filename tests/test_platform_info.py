"""Tests for host platform detection"""

from pathlib import Path

import pytest

from winprovision.domain.config.install import InstallConfig
from winprovision.domain.errors import UnsupportedArchitectureError
from winprovision.domain.models.platform import Architecture, InstallScope
from winprovision.infrastructure import platform_info
from winprovision.infrastructure.platform_info import (
    detect_architecture,
    resolve_install_root,
    resolve_scope,
)


class TestDetectArchitecture:
    """Tests for detect_architecture"""

    @pytest.mark.parametrize(
        "machine, expected",
        [
            ("AMD64", Architecture.X64),
            ("x86_64", Architecture.X64),
            ("ARM64", Architecture.ARM64),
            ("aarch64", Architecture.ARM64),
            ("x86", Architecture.X86),
            ("i686", Architecture.X86),
        ],
    )
    def test_aliases(self, machine, expected):
        assert detect_architecture(machine) == expected

    def test_wow64_host_architecture_wins(self):
        """A 32-bit process on 64-bit Windows reports the host architecture"""
        env = {"PROCESSOR_ARCHITECTURE": "x86", "PROCESSOR_ARCHITEW6432": "AMD64"}
        assert detect_architecture(environ=env) == Architecture.X64

    def test_processor_architecture_env(self):
        assert detect_architecture(environ={"PROCESSOR_ARCHITECTURE": "ARM64"}) == Architecture.ARM64

    def test_falls_back_to_platform_machine(self, monkeypatch):
        monkeypatch.setattr(platform_info.platform, "machine", lambda: "x86_64")
        assert detect_architecture(environ={}) == Architecture.X64

    def test_unsupported(self):
        with pytest.raises(UnsupportedArchitectureError, match="riscv64"):
            detect_architecture("riscv64")


class TestScope:
    """Tests for install scope resolution"""

    def test_auto_elevated(self):
        assert resolve_scope("auto", elevated=True) == InstallScope.MACHINE

    def test_auto_not_elevated(self):
        assert resolve_scope("auto", elevated=False) == InstallScope.USER

    def test_explicit_scope_ignores_elevation(self):
        assert resolve_scope("user", elevated=True) == InstallScope.USER
        assert resolve_scope("machine", elevated=False) == InstallScope.MACHINE


class TestInstallRoot:
    """Tests for install root resolution"""

    def test_explicit_root(self, tmp_path):
        config = InstallConfig(root=str(tmp_path))
        assert resolve_install_root(config, InstallScope.MACHINE, environ={}) == tmp_path

    def test_machine_scope_uses_program_files(self):
        env = {"ProgramFiles": "C:\\Program Files"}
        root = resolve_install_root(InstallConfig(), InstallScope.MACHINE, environ=env)
        assert root == Path("C:\\Program Files") / "winprovision"

    def test_user_scope_uses_local_app_data(self):
        env = {"LOCALAPPDATA": "C:\\Users\\ci\\AppData\\Local"}
        root = resolve_install_root(InstallConfig(), InstallScope.USER, environ=env)
        assert root == Path("C:\\Users\\ci\\AppData\\Local") / "Programs" / "winprovision"

    def test_user_scope_without_env(self, monkeypatch, tmp_path):
        monkeypatch.setattr(platform_info.Path, "home", classmethod(lambda cls: tmp_path))
        root = resolve_install_root(InstallConfig(), InstallScope.USER, environ={})
        assert root == tmp_path / ".local" / "share" / "winprovision"
