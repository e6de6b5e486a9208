"""Async worker-pool fetch of latest package versions using asyncio."""

from __future__ import annotations

import asyncio
from typing import Dict, Iterable

from pinsync.config import DEFAULT_MAX_WORKERS
from pinsync.errors import PinSyncError, RegistryError, wrap_error
from pinsync.logging import get_logger, log_exception
from pinsync.registry.base import AsyncRegistryClient

from .fetch import FetchResult, unique_names

logger = get_logger(__name__, component="async_fetch_pipeline")


async def fetch_one_async(client: AsyncRegistryClient, name: str) -> FetchResult | None:
    try:
        version = await client.latest_version(name)
    except PinSyncError as error:
        log_exception(logger, error.add_context(package=name), event="registry_fetch_failed")
        return None
    except Exception as exc:
        error = wrap_error(
            exc,
            RegistryError,
            message=f"Error fetching version for {name}",
            context={"package": name},
        )
        log_exception(logger, error, event="registry_fetch_failed")
        return None
    return FetchResult(name=name, latest_version=version)


async def fetch_latest_versions_async(
    names: Iterable[str],
    client: AsyncRegistryClient,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Dict[str, str]:
    """Cooperative counterpart of :func:`pinsync.pipeline.fetch.fetch_latest_versions`."""

    pending = unique_names(names)
    if not pending:
        return {}

    jobs: asyncio.Queue[str] = asyncio.Queue()
    for name in pending:
        jobs.put_nowait(name)

    latest: Dict[str, str] = {}

    async def worker() -> None:
        while True:
            try:
                name = jobs.get_nowait()
            except asyncio.QueueEmpty:
                return
            result = await fetch_one_async(client, name)
            if result is not None:
                latest[result.name] = result.latest_version

    worker_count = max(1, min(int(max_workers), len(pending)))
    await asyncio.gather(*(worker() for _ in range(worker_count)))

    logger.info(
        {
            "event": "registry_fetch_complete",
            "requested": len(pending),
            "resolved": len(latest),
            "workers": worker_count,
        }
    )
    return latest


__all__ = ["fetch_latest_versions_async", "fetch_one_async"]
