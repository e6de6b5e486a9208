import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for key in (
        "PINSYNC_REQUIREMENTS_FILE",
        "PINSYNC_REGISTRY_URL",
        "PINSYNC_REQUEST_TIMEOUT",
        "PINSYNC_MAX_WORKERS",
        "PINSYNC_INSTALLER",
        "PINSYNC_USER_AGENT",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_error_metrics():
    from pinsync.errors import reset_error_metrics

    reset_error_metrics()
    yield
    reset_error_metrics()
