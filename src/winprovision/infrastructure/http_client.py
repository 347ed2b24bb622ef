"""Shared HTTP client (requests + retry/backoff).

All release feed and download traffic goes through this client so every
request gets the same headers, timeout and retry policy.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from winprovision.domain.config.http import HttpConfig
from winprovision.domain.config.retry import RetryConfig
from winprovision.infrastructure.retry import retry_with_config

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 64


class HttpClient:
    """requests.Session wrapper with retries around every call"""

    def __init__(
        self,
        http_config: Optional[HttpConfig] = None,
        retry_config: Optional[RetryConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize HTTP client

        Args:
            http_config: Timeout, headers and token settings
            retry_config: Retry policy applied to each request
            session: Session to use (a new one is created if None)
        """
        self.http_config = http_config or HttpConfig()
        self.retry_config = retry_config or RetryConfig()
        self.timeout = self.http_config.timeout
        self.session = session or requests.Session()
        self.session.headers.update(self._default_headers())

    def _default_headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": self.http_config.user_agent,
            "Accept": "application/vnd.github+json",
        }
        if self.http_config.token:
            headers["Authorization"] = f"Bearer {self.http_config.token}"
        return headers

    def get_json(self, url: str) -> Any:
        """GET a URL and decode its JSON body

        Raises:
            requests.RequestException: If the last attempt failed
        """

        def _request() -> Any:
            logger.debug(f"HTTP GET {url}")
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()

        return retry_with_config(
            _request,
            self.retry_config,
            on_exhausted=f"Giving up on GET {url} after {self.retry_config.max_attempts} attempts",
        )

    def download(self, url: str, destination: Path) -> Path:
        """Download a URL to a file

        The body is streamed into a ".part" file which is renamed to the
        destination only once complete.

        Args:
            url: URL to download
            destination: Target file path

        Returns:
            Destination path
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(destination.name + ".part")

        def _download() -> Path:
            logger.debug(f"HTTP GET {url} -> {destination}")
            try:
                with self.session.get(
                    url,
                    stream=True,
                    timeout=self.timeout,
                    headers={"Accept": "application/octet-stream"},
                ) as resp:
                    resp.raise_for_status()
                    with open(partial, "wb") as f:
                        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                            if chunk:
                                f.write(chunk)
            except BaseException:
                partial.unlink(missing_ok=True)
                raise
            os.replace(partial, destination)
            return destination

        path = retry_with_config(
            _download,
            self.retry_config,
            on_exhausted=f"Giving up on download of {url} after {self.retry_config.max_attempts} attempts",
        )
        logger.info(f"Downloaded {url} ({destination.stat().st_size} bytes)")
        return path

    def close(self) -> None:
        self.session.close()
