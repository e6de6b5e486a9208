"""Registry client protocols used by the fetch pipelines."""

from __future__ import annotations

from typing import Protocol


class RegistryClient(Protocol):
    """Blocking lookup of the latest published version of a package."""

    def latest_version(self, name: str) -> str:
        """Return the latest version of ``name``.

        Raises a :class:`~pinsync.errors.PinSyncError` subclass on failure:
        ``NetworkError`` for transport problems, ``HTTPStatusError`` for
        non-success responses and ``DecodeError`` for malformed payloads.
        """


class AsyncRegistryClient(Protocol):
    """Asynchronous counterpart of :class:`RegistryClient`."""

    async def latest_version(self, name: str) -> str:
        """Return the latest version of ``name`` asynchronously."""
