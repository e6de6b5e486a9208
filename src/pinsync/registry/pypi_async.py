"""Asynchronous PyPI JSON API client using :mod:`aiohttp`."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import aiohttp

from pinsync.config import DEFAULT_REGISTRY_URL, DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from pinsync.errors import DecodeError, HTTPStatusError, NetworkError
from pinsync.validation import sanitize_package_name

from .pypi import extract_version


class AsyncPyPIRegistryClient:
    """Async registry client sharing one :class:`aiohttp.ClientSession`.

    Use as an async context manager to reuse a session across lookups;
    outside of one, each lookup opens and closes its own session.
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
        self._session: Optional[aiohttp.ClientSession] = None

    def _new_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )

    async def __aenter__(self) -> "AsyncPyPIRegistryClient":
        self._session = self._new_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        session, self._session = self._session, None
        if session is not None:
            await session.close()

    async def latest_version(self, name: str) -> str:
        package = sanitize_package_name(name)
        url = self.url_template.format(name=package)
        if self._session is not None:
            payload = await self._get_json(self._session, package, url)
        else:
            async with self._new_session() as session:
                payload = await self._get_json(session, package, url)
        return extract_version(payload, package)

    async def _get_json(self, session: aiohttp.ClientSession, package: str, url: str) -> Any:
        try:
            async with session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise HTTPStatusError(
                        f"Failed to get package info for {package} (status code: {resp.status})",
                        status_code=resp.status,
                        package=package,
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as exc:
                    raise DecodeError(
                        f"Registry response for {package} is not valid JSON",
                        context={"package": package},
                        cause=exc,
                    ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NetworkError(
                f"Request for {package} failed",
                context={"package": package, "url": url},
                cause=exc,
            ) from exc
