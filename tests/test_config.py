import pytest

from pinsync.config import DEFAULT_REGISTRY_URL, MAX_WORKERS_LIMIT, get_settings
from pinsync.errors import ConfigurationError


def test_defaults():
    settings = get_settings()

    assert settings.requirements_file == "requirements.txt"
    assert settings.registry_url == DEFAULT_REGISTRY_URL
    assert settings.max_workers == 10
    assert settings.request_timeout == 10.0
    assert settings.installer == "pip"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PINSYNC_REGISTRY_URL", "https://mirror.local/pypi/{name}/json")
    monkeypatch.setenv("PINSYNC_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("PINSYNC_INSTALLER", "uv")

    settings = get_settings()

    assert settings.registry_url == "https://mirror.local/pypi/{name}/json"
    assert settings.request_timeout == 2.5
    assert settings.installer == "uv"


@pytest.mark.parametrize(
    "key, value",
    [
        ("PINSYNC_REGISTRY_URL", "https://mirror.local/simple/"),
        ("PINSYNC_REQUEST_TIMEOUT", "0"),
        ("PINSYNC_MAX_WORKERS", "-2"),
        ("PINSYNC_MAX_WORKERS", "many"),
        ("PINSYNC_MAX_WORKERS", "500"),
        ("PINSYNC_REGISTRY_URL", "https://mirror.local/{name}/json?{v}"),
        ("PINSYNC_REGISTRY_URL", "https://mirror.local/{name}/{0}"),
        ("PINSYNC_REGISTRY_URL", "https://mirror.local/{name}/{"),
    ],
)
def test_invalid_values_raise_configuration_error(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigurationError):
        get_settings()


def test_worker_limit_applies_to_environment(monkeypatch):
    monkeypatch.setenv("PINSYNC_MAX_WORKERS", str(MAX_WORKERS_LIMIT))
    assert get_settings().max_workers == MAX_WORKERS_LIMIT

    monkeypatch.setenv("PINSYNC_MAX_WORKERS", str(MAX_WORKERS_LIMIT + 1))
    with pytest.raises(ConfigurationError) as excinfo:
        get_settings()

    assert excinfo.value.user_message.startswith("Invalid configuration")
