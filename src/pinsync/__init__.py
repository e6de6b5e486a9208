"""Refresh pinned requirements to the latest versions published on a package index."""

from __future__ import annotations

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
