"""Tests for ProvisionService"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from winprovision.application.provision_service import ProvisionService
from winprovision.domain.config import default_tools
from winprovision.domain.errors import ProvisioningError
from winprovision.domain.models.platform import Architecture
from winprovision.domain.models.release import Release, ReleaseAsset
from winprovision.infrastructure.release_feed import ReleaseFeed

BICEP_RELEASE = Release(
    tag="v0.30.3",
    assets=[
        ReleaseAsset(name="bicep-win-arm64.exe", download_url="https://example.test/arm64"),
        ReleaseAsset(name="bicep-win-x64.exe", download_url="https://example.test/x64"),
    ],
)


@pytest.fixture
def tools():
    return default_tools()


@pytest.fixture
def feed():
    feed = MagicMock()
    feed.get_release.return_value = BICEP_RELEASE
    feed.select_asset.side_effect = ReleaseFeed.select_asset
    return feed


@pytest.fixture
def http_client():
    client = MagicMock()
    client.download.side_effect = lambda url, destination: destination
    return client


@pytest.fixture
def installer(tmp_path):
    installer = MagicMock()
    installer.find_executable.return_value = None
    installer.install.side_effect = lambda name, tool, path: tmp_path / name / tool.executable
    installer.verify.return_value = "Bicep CLI version 0.30.3"
    return installer


@pytest.fixture
def service(tools, feed, http_client, installer, tmp_path):
    return ProvisionService(
        tools=tools,
        installer=installer,
        feed=feed,
        http_client=http_client,
        architecture=Architecture.X64,
        download_dir=tmp_path / "downloads",
    )


class TestEnsureTool:
    """Tests for ensure_tool"""

    def test_present_tool_is_skipped(self, service, installer, feed):
        installer.find_executable.return_value = Path("C:/tools/bicep/bicep.exe")

        status = service.ensure_tool("bicep")

        assert status.action == "present"
        assert status.is_successful
        feed.get_release.assert_not_called()
        installer.install.assert_not_called()

    def test_absent_tool_is_installed(self, service, installer, feed, http_client, tmp_path):
        status = service.ensure_tool("bicep")

        feed.get_release.assert_called_once_with("Azure/bicep", None)
        http_client.download.assert_called_once_with(
            "https://example.test/x64", tmp_path / "downloads" / "bicep-win-x64.exe"
        )
        installer.install.assert_called_once()
        installer.write_config_file.assert_called_once()
        installer.verify.assert_called_once()
        assert status.action == "installed"
        assert status.release == "v0.30.3"
        assert status.version == "Bicep CLI version 0.30.3"

    def test_force_reinstalls(self, service, installer, feed):
        installer.find_executable.return_value = Path("C:/tools/bicep/bicep.exe")

        status = service.ensure_tool("bicep", force=True)

        assert status.action == "installed"
        feed.get_release.assert_called_once()

    def test_arm64_asset(self, tools, feed, http_client, installer, tmp_path):
        service = ProvisionService(
            tools, installer, feed, http_client, Architecture.ARM64, download_dir=tmp_path
        )

        service.ensure_tool("bicep")

        assert http_client.download.call_args.args[0] == "https://example.test/arm64"

    def test_architecture_without_build(self, tools, feed, http_client, installer):
        service = ProvisionService(tools, installer, feed, http_client, Architecture.X86)

        with pytest.raises(ProvisioningError, match="no bicep build"):
            service.ensure_tool("bicep")

    def test_temporary_download_dir(self, tools, feed, http_client, installer):
        service = ProvisionService(tools, installer, feed, http_client, Architecture.X64)

        service.ensure_tool("bicep")

        destination = http_client.download.call_args.args[1]
        assert destination.name == "bicep-win-x64.exe"
        assert "winprovision-" in destination.parent.name

    def test_pinned_version(self, tools, feed, http_client, installer):
        tools["bicep"] = tools["bicep"].model_copy(update={"version": "v0.29.0"})
        service = ProvisionService(tools, installer, feed, http_client, Architecture.X64)

        service.ensure_tool("bicep")

        feed.get_release.assert_called_once_with("Azure/bicep", "v0.29.0")

    def test_install_requires_feed(self, tools, installer):
        service = ProvisionService(tools, installer)

        with pytest.raises(ProvisioningError, match="no release feed"):
            service.ensure_tool("bicep")


class TestEnsureTools:
    """Tests for ensure_tools"""

    def test_failure_is_recorded_and_processing_continues(self, service, feed):
        def _get_release(repository, version):
            if repository == "PowerShell/DSC":
                raise requests.ConnectionError("feed unreachable")
            return BICEP_RELEASE

        feed.get_release.side_effect = _get_release

        statuses = service.ensure_tools(["dsc", "bicep"])

        assert [s.name for s in statuses] == ["dsc", "bicep"]
        assert statuses[0].error == "feed unreachable"
        assert statuses[0].action == "missing"
        assert statuses[1].is_successful

    def test_asset_not_found_recorded(self, service, feed):
        feed.get_release.return_value = Release(tag="v1", assets=[])

        statuses = service.ensure_tools(["bicep"])

        assert not statuses[0].is_successful
        assert "No asset matching" in statuses[0].error

    def test_all_tools_by_default(self, service, installer):
        installer.find_executable.return_value = Path("C:/tools/x.exe")

        statuses = service.ensure_tools()

        assert [s.name for s in statuses] == ["dsc", "bicep", "winget"]

    def test_unknown_tool(self, service):
        with pytest.raises(ValueError, match="Unknown tool"):
            service.ensure_tools(["terraform"])

    def test_ensure_tool_unknown_name(self, service, feed):
        with pytest.raises(ValueError, match=r"Unknown tool\(s\): terraform. Available tools: dsc, bicep, winget"):
            service.ensure_tool("terraform")

        feed.get_release.assert_not_called()


class TestStatus:
    """Tests for status"""

    def test_reports_present_and_missing(self, tools, installer):
        installer.find_executable.side_effect = (
            lambda name, tool: Path("C:/tools/dsc/dsc.exe") if name == "dsc" else None
        )
        service = ProvisionService(tools, installer)

        statuses = service.status()

        assert [(s.name, s.action) for s in statuses] == [
            ("dsc", "present"),
            ("bicep", "missing"),
            ("winget", "missing"),
        ]
