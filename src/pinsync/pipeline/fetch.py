"""Bounded worker-pool fetch of latest package versions.

Names are fanned out over a job queue to a fixed set of worker threads and
successful lookups are fanned back in over a result queue. The calling thread
is the only consumer of that queue and therefore the only writer to the
returned mapping. A failed lookup is logged and dropped; it never stops the
other workers.
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, Iterable, List

from pinsync.config import DEFAULT_MAX_WORKERS
from pinsync.errors import PinSyncError, RegistryError, wrap_error
from pinsync.logging import get_logger, log_exception
from pinsync.registry.base import RegistryClient

logger = get_logger(__name__, component="fetch_pipeline")

# Queue markers: end of jobs for one worker, end of results for the collector.
_STOP = object()
_DONE = object()


@dataclass(frozen=True)
class FetchResult:
    """A successful registry lookup."""

    name: str
    latest_version: str


def unique_names(names: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(names))


def fetch_one(client: RegistryClient, name: str) -> FetchResult | None:
    """Look up ``name``, returning ``None`` after logging any failure."""

    try:
        version = client.latest_version(name)
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


def fetch_latest_versions(
    names: Iterable[str],
    client: RegistryClient,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Dict[str, str]:
    """Return ``{name: latest_version}`` for every name whose lookup succeeded.

    At most ``max_workers`` lookups run at once; fewer workers are started
    when there are fewer names. An empty input returns ``{}`` without starting
    any threads.
    """

    pending = unique_names(names)
    if not pending:
        return {}

    worker_count = max(1, min(int(max_workers), len(pending)))
    jobs: "queue.Queue[object]" = queue.Queue()
    results: "queue.Queue[object]" = queue.Queue()

    def _produce() -> None:
        for name in pending:
            jobs.put(name)
        for _ in range(worker_count):
            jobs.put(_STOP)

    def _work() -> None:
        while True:
            job = jobs.get()
            if job is _STOP:
                return
            result = fetch_one(client, job)  # type: ignore[arg-type]
            if result is not None:
                results.put(result)

    latest: Dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="pinsync-fetch") as pool:
        futures = [pool.submit(_work) for _ in range(worker_count)]

        def _supervise() -> None:
            wait(futures)
            results.put(_DONE)

        producer = threading.Thread(target=_produce, name="pinsync-producer", daemon=True)
        supervisor = threading.Thread(target=_supervise, name="pinsync-supervisor", daemon=True)
        producer.start()
        supervisor.start()

        while True:
            item = results.get()
            if item is _DONE:
                break
            latest[item.name] = item.latest_version  # type: ignore[attr-defined]

        producer.join()
        supervisor.join()

    logger.info(
        {
            "event": "registry_fetch_complete",
            "requested": len(pending),
            "resolved": len(latest),
            "workers": worker_count,
        }
    )
    return latest


__all__ = ["FetchResult", "fetch_latest_versions", "fetch_one"]
