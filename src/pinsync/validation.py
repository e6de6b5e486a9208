"""Input validation helpers shared across user and registry boundaries."""

from __future__ import annotations

import re
from typing import Any

from pinsync.errors import ValidationError

# Distribution names as accepted by the package index (PEP 508 identifiers).
PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?$")


class SanitizationError(ValidationError):
    """Raised when user supplied data fails validation."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, context={"field": field} if field else None)


def sanitize_package_name(name: str) -> str:
    normalized = name.strip()
    if not normalized or not PACKAGE_NAME_PATTERN.fullmatch(normalized):
        raise SanitizationError(
            f"{name!r} is not a valid package name.", field="package"
        )
    return normalized


def sanitize_positive_int(
    value: Any,
    *,
    field: str,
    minimum: int = 1,
    maximum: int | None = None,
) -> int:
    """Return ``value`` as a bounded positive integer or raise ``SanitizationError``."""

    if isinstance(value, bool):
        raise SanitizationError("Boolean value is not allowed.", field=field)
    try:
        normalized = int(value)
    except (TypeError, ValueError):
        raise SanitizationError("Value must be an integer.", field=field) from None
    if normalized < minimum:
        raise SanitizationError(
            f"Value must be at least {minimum}.",
            field=field,
        )
    if maximum is not None and normalized > maximum:
        raise SanitizationError(
            f"Value must be at most {maximum}.",
            field=field,
        )
    return normalized


__all__ = [
    "PACKAGE_NAME_PATTERN",
    "SanitizationError",
    "sanitize_package_name",
    "sanitize_positive_int",
]
