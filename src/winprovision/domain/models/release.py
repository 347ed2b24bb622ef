"""Release feed models"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a release"""

    name: str
    download_url: str
    size: int = 0


@dataclass
class Release:
    """A published release of a tool"""

    tag: str
    assets: List[ReleaseAsset] = field(default_factory=list)

    @property
    def asset_names(self) -> List[str]:
        return [asset.name for asset in self.assets]

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Release":
        """Build a Release from a GitHub releases API payload

        Args:
            payload: Decoded JSON of a single release

        Returns:
            Release instance

        Raises:
            ValueError: If the payload has no tag_name
        """
        tag = payload.get("tag_name")
        if not tag:
            raise ValueError("Release payload has no tag_name")
        assets = [
            ReleaseAsset(
                name=item["name"],
                download_url=item["browser_download_url"],
                size=int(item.get("size") or 0),
            )
            for item in payload.get("assets") or []
            if item.get("name") and item.get("browser_download_url")
        ]
        return cls(tag=tag, assets=assets)
