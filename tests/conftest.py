# tests/conftest.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

import termprofiles.core.profiles as profiles_mod
from termprofiles.core.schema import build_config_data
from termprofiles.core.user_config import UserConfig
from termprofiles.storage.json_backend import JsonFileBackend


@pytest.fixture()
def profiles_path(tmp_path: Path) -> Path:
    return tmp_path / "user-data" / "profiles.json"


@pytest.fixture()
def write_profiles(profiles_path: Path) -> Callable[[Any], None]:
    def _write(data: Any, raw: str | None = None) -> None:
        profiles_path.parent.mkdir(parents=True, exist_ok=True)
        profiles_path.write_text(raw if raw is not None else json.dumps(data), encoding="utf-8")

    return _write


@pytest.fixture()
def read_profiles(profiles_path: Path) -> Callable[[], Any]:
    return lambda: json.loads(profiles_path.read_text(encoding="utf-8"))


@pytest.fixture()
def backend(profiles_path: Path) -> JsonFileBackend:
    return JsonFileBackend(profiles_path)


@pytest.fixture()
def user_config() -> UserConfig:
    return UserConfig()


@pytest.fixture()
def config_data(user_config: UserConfig):
    return build_config_data(user_config)


@pytest.fixture()
def store(backend: JsonFileBackend, config_data):
    s = profiles_mod._ProfilesStore(backend, config_data)
    yield s
    s.dispose()
