"""Tests for run_command"""

import subprocess
from types import SimpleNamespace

import pytest

from winprovision.domain.errors import ToolInvocationError
from winprovision.infrastructure import process
from winprovision.infrastructure.process import CommandResult, run_command


def _fake_run(returncode=0, stdout="", stderr=""):
    calls = []

    def _run(args, **kwargs):
        calls.append((args, kwargs))
        return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)

    return _run, calls


def test_success(monkeypatch):
    fake, calls = _fake_run(stdout="dsc 3.0.0\n")
    monkeypatch.setattr(process.subprocess, "run", fake)

    result = run_command(["dsc.exe", "--version"], timeout=10)

    assert result.exit_code == 0
    assert result.output == "dsc 3.0.0"
    assert calls[0][0] == ["dsc.exe", "--version"]
    assert calls[0][1]["timeout"] == 10
    assert calls[0][1]["capture_output"] is True


def test_nonzero_exit_raises(monkeypatch):
    fake, _ = _fake_run(returncode=2, stdout="partial", stderr="resource failed")
    monkeypatch.setattr(process.subprocess, "run", fake)

    with pytest.raises(ToolInvocationError) as exc_info:
        run_command(["dsc.exe", "config", "set"])

    assert exc_info.value.exit_code == 2
    assert "resource failed" in exc_info.value.output
    assert "exited with code 2" in str(exc_info.value)


def test_nonzero_exit_without_check(monkeypatch):
    fake, _ = _fake_run(returncode=1, stderr="warn")
    monkeypatch.setattr(process.subprocess, "run", fake)

    result = run_command(["tool"], check=False)

    assert result.exit_code == 1
    assert result.output == "warn"


def test_missing_executable(monkeypatch):
    def _run(args, **kwargs):
        raise FileNotFoundError(2, "No such file", args[0])

    monkeypatch.setattr(process.subprocess, "run", _run)

    with pytest.raises(ToolInvocationError) as exc_info:
        run_command(["missing.exe"])

    assert exc_info.value.exit_code is None
    assert "Failed to run missing.exe" in str(exc_info.value)


def test_timeout(monkeypatch):
    def _run(args, **kwargs):
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])

    monkeypatch.setattr(process.subprocess, "run", _run)

    with pytest.raises(ToolInvocationError, match="timed out"):
        run_command(["slow.exe"], timeout=1)


def test_output_joins_streams():
    result = CommandResult(args=[], exit_code=0, stdout="out\n", stderr="err\n")
    assert result.output == "out\nerr"
