import pytest

from valuepack.hashers import (
    HASHER_CONFIG_ENV_VAR,
    HASHER_ENV_VAR,
    clear_default_hasher_cache,
)


@pytest.fixture(autouse=True)
def _isolate_hasher_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(HASHER_ENV_VAR, raising=False)
    monkeypatch.delenv(HASHER_CONFIG_ENV_VAR, raising=False)
    clear_default_hasher_cache()
    yield
    clear_default_hasher_cache()
