"""Package registry clients."""

from .base import AsyncRegistryClient, RegistryClient
from .pypi import PyPIRegistryClient, extract_version
from .pypi_async import AsyncPyPIRegistryClient

__all__ = [
    "AsyncPyPIRegistryClient",
    "AsyncRegistryClient",
    "PyPIRegistryClient",
    "RegistryClient",
    "extract_version",
]
