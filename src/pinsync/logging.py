"""Structured logging helpers with contextual redaction."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import PinSyncError, record_error, redact_url_credentials, sanitize_context


def _json_ready(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Mapping):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_ready(v) for v in value]
    return repr(value)


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that serialises records as JSON strings."""

    def process(self, msg: Any, kwargs: Mapping[str, Any]):  # type: ignore[override]
        extra_context = kwargs.pop("context", None)
        context = dict(self.extra or {})
        if extra_context:
            context.update(extra_context)
        payload: dict[str, Any]
        if isinstance(msg, Mapping):
            payload = dict(msg)
        else:
            payload = {"message": redact_url_credentials(str(msg))}
        sanitized_context = sanitize_context(context)
        if sanitized_context:
            payload.setdefault("context", {}).update(sanitized_context)
        payload.setdefault("logger", self.logger.name)
        payload.setdefault(
            "timestamp",
            datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        kwargs.setdefault("extra", {})["structured"] = payload
        return json.dumps(payload, default=_json_ready), dict(kwargs)


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """Return a structured logger adapter bound to ``name``."""

    return StructuredLoggerAdapter(logging.getLogger(name), sanitize_context(context))


def configure_logging(verbose: bool = False) -> None:
    """Install a plain stderr handler for CLI runs."""

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def log_exception(
    logger: logging.Logger | logging.LoggerAdapter,
    error: PinSyncError,
    *,
    event: str,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Emit a structured error log and update error metrics.

    The failing package, when known, is lifted to the top of the payload so
    per-package failures can be filtered without parsing the context.
    """

    combined_context: dict[str, Any] = {}
    if context:
        combined_context.update(context)
    combined_context.update(error.context)
    payload = {
        "event": event,
        "error": error.to_dict(),
    }
    package = combined_context.get("package")
    if package is not None:
        payload["package"] = str(package)
    if combined_context:
        payload["context"] = sanitize_context(combined_context)
    record_error(error)
    logger.error(payload)


__all__ = ["StructuredLoggerAdapter", "configure_logging", "get_logger", "log_exception"]
