"""PyPI JSON API client built on :mod:`requests`."""

from __future__ import annotations

from typing import Any

import requests  # type: ignore[import]

from pinsync.config import DEFAULT_REGISTRY_URL, DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from pinsync.errors import DecodeError, HTTPStatusError, NetworkError
from pinsync.validation import sanitize_package_name


def extract_version(payload: Any, package: str) -> str:
    """Return ``payload["info"]["version"]`` or raise :class:`DecodeError`."""

    info = payload.get("info") if isinstance(payload, dict) else None
    version = info.get("version") if isinstance(info, dict) else None
    if not isinstance(version, str) or not version.strip():
        raise DecodeError(
            "Registry payload is missing info.version",
            context={"package": package},
        )
    return version.strip()


class PyPIRegistryClient:
    """Look up the latest release of a package on a PyPI-compatible index.

    ``url_template`` must contain a ``{name}`` placeholder. Every request is
    bounded by ``timeout`` seconds so a stalled server cannot hang a worker.
    """

    def __init__(
        self,
        *,
        url_template: str = DEFAULT_REGISTRY_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.url_template = url_template
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}

    def url_for(self, package: str) -> str:
        return self.url_template.format(name=package)

    def latest_version(self, name: str) -> str:
        package = sanitize_package_name(name)
        url = self.url_for(package)
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkError(
                f"Request for {package} failed",
                context={"package": package, "url": url},
                cause=exc,
            ) from exc

        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(
                f"Failed to get package info for {package} (status code: {response.status_code})",
                status_code=response.status_code,
                package=package,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(
                f"Registry response for {package} is not valid JSON",
                context={"package": package},
                cause=exc,
            ) from exc
        return extract_version(payload, package)
