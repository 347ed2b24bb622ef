"""Service for provisioning tools from their release feeds"""

import logging
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from winprovision.domain.config.tool import ToolConfig
from winprovision.domain.errors import ProvisioningError, UnsupportedArchitectureError
from winprovision.domain.models.platform import Architecture
from winprovision.domain.models.results import ToolStatus
from winprovision.infrastructure.http_client import HttpClient
from winprovision.infrastructure.installer import ToolInstaller
from winprovision.infrastructure.release_feed import ReleaseFeed

logger = logging.getLogger(__name__)


class ProvisionService:
    """Detect, fetch, install, verify and report each configured tool"""

    def __init__(
        self,
        tools: Dict[str, ToolConfig],
        installer: ToolInstaller,
        feed: Optional[ReleaseFeed] = None,
        http_client: Optional[HttpClient] = None,
        architecture: Optional[Architecture] = None,
        download_dir: Optional[Path] = None,
    ):
        """Initialize provision service

        Args:
            tools: Tool configurations keyed by name
            installer: Installer bound to the resolved install root
            feed: Release feed reader (required for installing)
            http_client: HTTP client used for downloads (required for installing)
            architecture: Host architecture (required for installing)
            download_dir: Where assets are downloaded (system temp dir if None)
        """
        self.tools = tools
        self.feed = feed
        self.http_client = http_client
        self.installer = installer
        self.architecture = architecture
        self.download_dir = Path(download_dir) if download_dir else None

    def _resolve_names(self, names: Optional[Iterable[str]]) -> List[str]:
        if not names:
            return list(self.tools.keys())
        names = list(names)
        unknown = [n for n in names if n not in self.tools]
        if unknown:
            available = ", ".join(self.tools.keys())
            raise ValueError(f"Unknown tool(s): {', '.join(unknown)}. Available tools: {available}")
        return names

    def _arch_token(self, name: str, tool: ToolConfig) -> str:
        token = tool.arch_names.get(self.architecture.value)
        if token is None:
            raise UnsupportedArchitectureError(f"{self.architecture.value} (no {name} build)")
        return token

    def ensure_tool(self, name: str, force: bool = False) -> ToolStatus:
        """Make sure a tool is installed

        Args:
            name: Tool name
            force: Reinstall even if the tool is already present

        Returns:
            ToolStatus describing what was done

        Raises:
            ProvisioningError: If any step fails
            requests.RequestException: If the release feed stays unreachable
        """
        self._resolve_names([name])
        tool = self.tools[name]

        existing = self.installer.find_executable(name, tool)
        if existing and not force:
            logger.info(f"{name} already present at {existing}")
            return ToolStatus(name=name, action="present", path=str(existing))

        if self.feed is None or self.http_client is None or self.architecture is None:
            raise ProvisioningError(f"Cannot install {name}: no release feed configured")

        arch_token = self._arch_token(name, tool)
        release = self.feed.get_release(tool.repository, tool.version)
        asset = self.feed.select_asset(release, tool.asset_pattern, arch_token)
        logger.info(f"{name}: using {asset.name} from {release.tag}")

        if self.download_dir is not None:
            path = self._download_and_install(name, tool, asset, self.download_dir)
        else:
            with tempfile.TemporaryDirectory(prefix="winprovision-") as tmp:
                path = self._download_and_install(name, tool, asset, Path(tmp))

        self.installer.write_config_file(name, tool)
        version = self.installer.verify(name, tool)
        located = self.installer.find_executable(name, tool) or path
        logger.info(f"{name} {version or release.tag} installed at {located}")
        return ToolStatus(
            name=name,
            action="installed",
            path=str(located),
            version=version or None,
            release=release.tag,
        )

    def _download_and_install(self, name, tool, asset, directory: Path) -> Path:
        asset_path = self.http_client.download(asset.download_url, directory / asset.name)
        return self.installer.install(name, tool, asset_path)

    def ensure_tools(self, names: Optional[Iterable[str]] = None, force: bool = False) -> List[ToolStatus]:
        """Provision several tools, continuing past failures

        Args:
            names: Tools to provision (all configured tools if None)
            force: Reinstall tools that are already present

        Returns:
            One ToolStatus per tool, failed ones carry an error
        """
        results = []
        for name in self._resolve_names(names):
            try:
                results.append(self.ensure_tool(name, force=force))
            except Exception as e:
                # requests errors surface here too, once retries are exhausted
                logger.error(f"Failed to provision {name}: {e}")
                results.append(ToolStatus(name=name, action="missing", error=str(e)))
        return results

    def status(self, names: Optional[Iterable[str]] = None) -> List[ToolStatus]:
        """Report which tools are installed, without network access"""
        results = []
        for name in self._resolve_names(names):
            path = self.installer.find_executable(name, self.tools[name])
            if path:
                results.append(ToolStatus(name=name, action="present", path=str(path)))
            else:
                results.append(ToolStatus(name=name, action="missing"))
        return results
