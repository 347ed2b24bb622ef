"""GitHub release feed lookup and asset selection"""

import fnmatch
import logging
from typing import Optional

from winprovision.domain.errors import AssetNotFoundError
from winprovision.domain.models.release import Release, ReleaseAsset
from winprovision.infrastructure.http_client import HttpClient

logger = logging.getLogger(__name__)


class ReleaseFeed:
    """Reads releases of a repository from the GitHub REST API"""

    def __init__(self, http_client: HttpClient, api_url: str = "https://api.github.com"):
        self.http_client = http_client
        self.api_url = api_url.rstrip("/")

    def release_url(self, repository: str, version: Optional[str] = None) -> str:
        """Build the API URL of a release (latest when version is None)"""
        if version:
            return f"{self.api_url}/repos/{repository}/releases/tags/{version}"
        return f"{self.api_url}/repos/{repository}/releases/latest"

    def get_release(self, repository: str, version: Optional[str] = None) -> Release:
        """Fetch a release

        Args:
            repository: Repository in owner/name form
            version: Release tag (None = latest release)

        Returns:
            Release with its assets
        """
        payload = self.http_client.get_json(self.release_url(repository, version))
        release = Release.from_api(payload)
        logger.info(f"{repository}: release {release.tag} has {len(release.assets)} assets")
        return release

    @staticmethod
    def select_asset(release: Release, pattern: str, arch_token: str) -> ReleaseAsset:
        """Pick the asset whose name matches the pattern

        Args:
            release: Release to search
            pattern: Glob with an optional {arch} placeholder
            arch_token: Architecture name as used in asset names

        Returns:
            First matching asset in feed order

        Raises:
            AssetNotFoundError: If nothing matches
        """
        resolved = pattern.replace("{arch}", arch_token).lower()
        matches = [a for a in release.assets if fnmatch.fnmatchcase(a.name.lower(), resolved)]
        if not matches:
            raise AssetNotFoundError(resolved, release.tag, release.asset_names)
        if len(matches) > 1:
            logger.debug(
                f"{len(matches)} assets match {resolved!r}, using {matches[0].name}: "
                + ", ".join(m.name for m in matches[1:])
                + " skipped"
            )
        return matches[0]
