"""Command line interface for pinsync."""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from pinsync.config import MAX_WORKERS_LIMIT, Settings, get_settings
from pinsync.errors import FileAccessError, InstallerExecError, PinSyncError
from pinsync.installer import install_packages
from pinsync.logging import configure_logging
from pinsync.pinfile import PinEntry, PinFile, read_pin_file, render_lines, write_pin_file
from pinsync.pipeline import fetch_latest_versions, fetch_latest_versions_async
from pinsync.registry import AsyncPyPIRegistryClient, PyPIRegistryClient
from pinsync.validation import SanitizationError, sanitize_positive_int


def _positive_int(raw: str) -> int:
    try:
        return sanitize_positive_int(raw, field="workers", maximum=MAX_WORKERS_LIMIT)
    except SanitizationError as exc:
        raise argparse.ArgumentTypeError(exc.user_message) from None


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("Value must be a number.") from None
    if value <= 0:
        raise argparse.ArgumentTypeError("Value must be positive.")
    return value


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    """Create the CLI argument parser with defaults taken from ``settings``."""

    settings = settings or get_settings()
    parser = argparse.ArgumentParser(
        prog="pinsync",
        description="Update pinned versions in a requirements file to the latest registry releases",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        default=Path(settings.requirements_file),
        help="Path to the requirements file",
    )
    parser.add_argument(
        "-i",
        "--install",
        action="store_true",
        help="Install packages after updating the requirements file",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=_positive_int,
        default=settings.max_workers,
        help="Max parallel registry lookups",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=settings.request_timeout,
        help="Per-request registry timeout in seconds",
    )
    parser.add_argument(
        "--async-fetch",
        action="store_true",
        help="Fetch versions with asyncio/aiohttp instead of worker threads",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the updated file to stdout instead of writing it (never installs)",
    )
    parser.add_argument(
        "--timings",
        action="store_true",
        help="Print per-step timings",
    )
    parser.add_argument(
        "--installer",
        default=settings.installer,
        help="Installer executable invoked as '<installer> install -r <file>'",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress information to stderr",
    )
    parser.set_defaults(registry_url=settings.registry_url, user_agent=settings.user_agent)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    return build_parser().parse_args(argv)


@dataclass(frozen=True)
class ReadResult:
    pin_file: PinFile
    duration: float


@dataclass(frozen=True)
class FetchStepResult:
    latest: Dict[str, str]
    failed: List[str]
    duration: float


@dataclass(frozen=True)
class RewriteResult:
    """Rendered content plus the pins that actually changed."""

    rendered: List[str]
    updated: List[tuple[PinEntry, str]] = field(default_factory=list)
    duration: float = 0.0


def _read_step(args: argparse.Namespace) -> ReadResult:
    start = time.perf_counter()
    pin_file = read_pin_file(args.file)
    return ReadResult(pin_file=pin_file, duration=time.perf_counter() - start)


async def _fetch_async(args: argparse.Namespace, names: List[str]) -> Dict[str, str]:
    async with AsyncPyPIRegistryClient(
        url_template=args.registry_url,
        timeout=args.timeout,
        user_agent=args.user_agent,
    ) as client:
        return await fetch_latest_versions_async(names, client, max_workers=args.workers)


def _fetch_step(args: argparse.Namespace, pin_file: PinFile) -> FetchStepResult:
    start = time.perf_counter()
    names = list(pin_file.pins)
    if args.async_fetch:
        latest = asyncio.run(_fetch_async(args, names))
    else:
        client = PyPIRegistryClient(
            url_template=args.registry_url,
            timeout=args.timeout,
            user_agent=args.user_agent,
        )
        latest = fetch_latest_versions(names, client, max_workers=args.workers)
    failed = [name for name in names if name not in latest]
    return FetchStepResult(latest=latest, failed=failed, duration=time.perf_counter() - start)


def _rewrite_step(
    args: argparse.Namespace, pin_file: PinFile, latest: Dict[str, str]
) -> RewriteResult:
    start = time.perf_counter()
    if args.dry_run:
        rendered = render_lines(pin_file.lines, latest)
    else:
        rendered = write_pin_file(pin_file.path, pin_file.lines, latest)
    updated = [
        (entry, latest[entry.name])
        for entry in pin_file.entries()
        if entry.name in latest and latest[entry.name] != entry.pinned_version
    ]
    return RewriteResult(rendered=rendered, updated=updated, duration=time.perf_counter() - start)


def _install_step(args: argparse.Namespace, pin_file: PinFile) -> float:
    start = time.perf_counter()
    install_packages(pin_file.path, installer=args.installer)
    return time.perf_counter() - start


def _print_timings(timings: Dict[str, float], stream: TextIO) -> None:
    def fmt(value: float) -> str:
        return f"{value:.2f}s"

    steps = ", ".join(f"{name}={fmt(value)}" for name, value in timings.items())
    print(f"\nTimings: {steps}, total={fmt(sum(timings.values()))}", file=stream)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI; returns the process exit status.

    With ``--dry-run`` stdout carries only the rendered pin file; progress
    and summaries go to stderr.
    """

    try:
        args = parse_args(argv)
    except PinSyncError as error:
        print(f"Error loading configuration: {error.user_message}", file=sys.stderr)
        return 1
    configure_logging(args.verbose)
    filename = args.file.name
    progress = sys.stderr if args.dry_run else sys.stdout
    timings: Dict[str, float] = {}

    try:
        read_result = _read_step(args)
    except FileAccessError as error:
        print(f"Error parsing {filename}: {error.user_message}", file=sys.stderr)
        return 1
    timings["read"] = read_result.duration

    pin_file = read_result.pin_file
    print(f"[1/3] Checking {len(pin_file.pins)} packages…", file=progress, flush=True)
    fetch_result = _fetch_step(args, pin_file)
    timings["fetch"] = fetch_result.duration
    if fetch_result.failed:
        print(
            f"      Could not resolve {len(fetch_result.failed)} packages: "
            f"{', '.join(fetch_result.failed)}",
            file=progress,
            flush=True,
        )

    print("[2/3] Rewriting pins…", file=progress, flush=True)
    try:
        rewrite_result = _rewrite_step(args, pin_file, fetch_result.latest)
    except FileAccessError as error:
        print(f"Error updating {filename}: {error.user_message}", file=sys.stderr)
        return 1
    timings["rewrite"] = rewrite_result.duration

    for entry, version in rewrite_result.updated:
        previous = entry.pinned_version or "unpinned"
        print(f"      {entry.name}: {previous} -> {version}", file=progress)

    if args.dry_run:
        sys.stdout.write("".join(rewrite_result.rendered))
        sys.stdout.flush()
    else:
        print(f"{filename} has been updated to the latest package versions.")

    if args.install and not args.dry_run:
        print("[3/3] Installing packages…", flush=True)
        try:
            timings["install"] = _install_step(args, pin_file)
        except InstallerExecError as error:
            print(f"Error installing packages: {error.user_message}", file=sys.stderr)
            return 1
        print("Packages have been installed successfully.")

    if args.timings:
        _print_timings(timings, progress)
    return 0


__all__ = ["build_parser", "main", "parse_args"]


if __name__ == "__main__":
    raise SystemExit(main())
