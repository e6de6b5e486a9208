"""Read and rewrite pin files such as ``requirements.txt``.

Each physical line is kept together with its original terminator so that a
rewrite with nothing to substitute reproduces the file byte for byte.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from pinsync.errors import ReadError, ScanError, WriteError

COMMENT_MARKER = "#"
DECLARATION_PATTERN = re.compile(r"^\s*([A-Za-z0-9_-]+)(?:\s*==\s*(\S+))?")


@dataclass(frozen=True)
class PinEntry:
    name: str
    pinned_version: str = ""


@dataclass(frozen=True)
class LineRecord:
    """One physical line; ``name`` is ``None`` for pass-through lines."""

    raw: str
    name: Optional[str] = None
    pinned_version: str = ""

    @property
    def is_declaration(self) -> bool:
        return self.name is not None

    @property
    def terminator(self) -> str:
        body = self.raw.rstrip("\r\n")
        return self.raw[len(body):]


@dataclass
class PinFile:
    path: Path
    lines: List[LineRecord] = field(default_factory=list)
    pins: Dict[str, str] = field(default_factory=dict)

    def entries(self) -> List[PinEntry]:
        return [PinEntry(name, version) for name, version in self.pins.items()]


def classify_line(raw: str) -> LineRecord:
    """Return the :class:`LineRecord` for a single physical line."""

    body = raw.rstrip("\r\n")
    stripped = body.lstrip()
    if not stripped or stripped.startswith(COMMENT_MARKER):
        return LineRecord(raw=raw)
    match = DECLARATION_PATTERN.match(body)
    if match is None:
        return LineRecord(raw=raw)
    return LineRecord(raw=raw, name=match.group(1), pinned_version=match.group(2) or "")


def parse_lines(raw_lines: Sequence[str]) -> tuple[List[LineRecord], Dict[str, str]]:
    """Classify ``raw_lines``; later duplicates overwrite earlier pins."""

    records = [classify_line(raw) for raw in raw_lines]
    pins: Dict[str, str] = {}
    for record in records:
        if record.name is not None:
            pins[record.name] = record.pinned_version
    return records, pins


def read_pin_file(path: str | Path) -> PinFile:
    """Parse the pin file at ``path``.

    Raises :class:`ReadError` when the file cannot be opened and
    :class:`ScanError` when reading or UTF-8 decoding fails part way.
    """

    pin_path = Path(path)
    try:
        handle = pin_path.open("r", encoding="utf-8", newline="")
    except OSError as exc:
        raise ReadError(
            f"Unable to open {pin_path}: {exc.strerror or exc}",
            context={"path": str(pin_path)},
            cause=exc,
        ) from exc

    with handle:
        try:
            raw_lines = list(handle)
        except (OSError, UnicodeDecodeError) as exc:
            raise ScanError(
                f"Unable to read {pin_path}: {exc}",
                context={"path": str(pin_path)},
                cause=exc,
            ) from exc

    records, pins = parse_lines(raw_lines)
    return PinFile(path=pin_path, lines=records, pins=pins)


def render_line(record: LineRecord, latest: Mapping[str, str]) -> str:
    if record.name is not None and record.name in latest:
        return f"{record.name}=={latest[record.name]}{record.terminator}"
    return record.raw


def render_lines(lines: Sequence[LineRecord], latest: Mapping[str, str]) -> List[str]:
    """Substitute ``name==version`` for every declaration with a known version."""

    return [render_line(record, latest) for record in lines]


def write_pin_file(
    path: str | Path, lines: Sequence[LineRecord], latest: Mapping[str, str]
) -> List[str]:
    """Truncate ``path`` and write the rendered lines, returning them.

    A failure mid-write can leave a partially written file behind.
    """

    pin_path = Path(path)
    rendered = render_lines(lines, latest)
    try:
        with pin_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write("".join(rendered))
    except OSError as exc:
        raise WriteError(
            f"Unable to write {pin_path}: {exc.strerror or exc}",
            context={"path": str(pin_path)},
            cause=exc,
        ) from exc
    return rendered


__all__ = [
    "COMMENT_MARKER",
    "DECLARATION_PATTERN",
    "LineRecord",
    "PinEntry",
    "PinFile",
    "classify_line",
    "parse_lines",
    "read_pin_file",
    "render_line",
    "render_lines",
    "write_pin_file",
]
