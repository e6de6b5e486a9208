"""Concurrent registry fetch pipelines."""

from .fetch import FetchResult, fetch_latest_versions
from .fetch_async import fetch_latest_versions_async

__all__ = ["FetchResult", "fetch_latest_versions", "fetch_latest_versions_async"]
