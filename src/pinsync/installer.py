"""Run the package installer against a rewritten pin file."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

from pinsync.config import DEFAULT_INSTALLER
from pinsync.errors import InstallerExecError


def install_command(path: str | Path, installer: str = DEFAULT_INSTALLER) -> List[str]:
    return [installer, "install", "-r", str(path)]


def install_packages(path: str | Path, *, installer: str = DEFAULT_INSTALLER) -> None:
    """Run ``<installer> install -r <path>`` with inherited stdout/stderr."""

    command = install_command(path, installer)
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError as exc:
        raise InstallerExecError(
            f"{installer} exited with status {exc.returncode}",
            context={"command": command, "returncode": exc.returncode},
            cause=exc,
        ) from exc
    except OSError as exc:
        raise InstallerExecError(
            f"Unable to launch {installer}: {exc.strerror or exc}",
            context={"command": command},
            cause=exc,
        ) from exc


__all__ = ["install_command", "install_packages"]
