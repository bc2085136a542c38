from __future__ import annotations

import json
from pathlib import Path

import pytest

from valuepack.collection import HashedSet
from valuepack.hashers import (
    CanonicalJsonHasher,
    HASHER_CONFIG_ENV_VAR,
    HASHER_ENV_VAR,
    HasherConfigError,
    HasherRegistryError,
    initialize_default_hashers,
    list_hasher_keys,
    load_hasher_config,
    register_hasher,
    reset_hasher_registry,
    resolve_default_hasher,
)


def _write_config(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_default_hasher_is_sha256() -> None:
    assert resolve_default_hasher(env={}).algorithm == "sha256"


def test_env_var_selects_default_hasher(monkeypatch) -> None:
    monkeypatch.setenv(HASHER_ENV_VAR, "blake2b")

    assert resolve_default_hasher().algorithm == "blake2b"
    assert HashedSet().hasher.algorithm == "blake2b"


def test_unknown_env_hasher_raises() -> None:
    with pytest.raises(HasherRegistryError):
        resolve_default_hasher(env={HASHER_ENV_VAR: "missing"})


def test_config_file_sets_default(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "hashers.json",
        {"config_version": 1, "default": "sha1"},
    )

    config = load_hasher_config(config_path)
    assert config.default == "sha1"
    assert config.hashers == {}

    hasher = resolve_default_hasher(env={HASHER_CONFIG_ENV_VAR: str(config_path)})
    assert hasher.algorithm == "sha1"


def test_env_hasher_overrides_config_default(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "hashers.json",
        {"config_version": 1, "default": "sha1"},
    )

    hasher = resolve_default_hasher(
        env={HASHER_CONFIG_ENV_VAR: str(config_path), HASHER_ENV_VAR: "md5"}
    )

    assert hasher.algorithm == "md5"


def test_config_file_registers_plugin_hashers(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "config_hasher_fixture.py").write_text(
        "from valuepack.hashers import CanonicalJsonHasher\n"
        "\n"
        "def build():\n"
        "    return CanonicalJsonHasher('sha512')\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    config_path = _write_config(
        tmp_path / "hashers.json",
        {
            "config_version": 1,
            "default": "wide",
            "hashers": {"wide": "config_hasher_fixture:build"},
        },
    )

    try:
        hasher = resolve_default_hasher(env={HASHER_CONFIG_ENV_VAR: str(config_path)})
        assert hasher.algorithm == "sha512"
        assert "wide" in list_hasher_keys()
    finally:
        reset_hasher_registry()
        initialize_default_hashers()


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ([], "must be a JSON object"),
        ({"config_version": 2}, "Unsupported hasher config version"),
        ({"config_version": 1, "extra": True}, "unsupported keys: extra"),
        ({"config_version": 1, "default": ""}, "'default'"),
        ({"config_version": 1, "hashers": []}, "'hashers'"),
        ({"config_version": 1, "hashers": {"x": "no-separator"}}, "module:attribute"),
    ],
)
def test_invalid_config_payloads(tmp_path: Path, payload: object, message: str) -> None:
    config_path = _write_config(tmp_path / "hashers.json", payload)

    with pytest.raises(HasherConfigError, match=message):
        load_hasher_config(config_path)


def test_invalid_config_json(tmp_path: Path) -> None:
    config_path = tmp_path / "hashers.json"
    config_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(HasherConfigError, match="Invalid hasher config JSON"):
        load_hasher_config(config_path)


def test_missing_config_file_raises_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_hasher_config(tmp_path / "absent.json")


def test_default_hasher_is_reused_for_the_same_settings(monkeypatch) -> None:
    monkeypatch.setenv(HASHER_ENV_VAR, "sha1")

    first = HashedSet()
    second = HashedSet()

    assert first.hasher is second.hasher
    monkeypatch.setenv(HASHER_ENV_VAR, "md5")
    assert HashedSet().hasher.algorithm == "md5"


def test_config_file_is_read_once_per_settings(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "hashers.json",
        {"config_version": 1, "default": "sha1"},
    )
    env = {HASHER_CONFIG_ENV_VAR: str(config_path)}

    first = resolve_default_hasher(env=env)
    config_path.unlink()
    second = resolve_default_hasher(env=env)

    assert second is first
    assert second.algorithm == "sha1"


def test_registry_changes_invalidate_cached_default() -> None:
    before = resolve_default_hasher(env={})

    try:
        register_hasher("sha256", lambda: CanonicalJsonHasher("blake2b"), overwrite=True)
        after = resolve_default_hasher(env={})
        assert after is not before
        assert after.algorithm == "blake2b"
    finally:
        reset_hasher_registry()
        initialize_default_hashers()
