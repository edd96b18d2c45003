from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from termprofiles.core.events import Emitter, Subscription

DID_CHANGE = "did-change"


class UserConfig:
    """
    User-level overrides keyed by config key path (e.g. "spawn.command").

    Base-profile derivation reads these; a change notifies subscribers with
    {"key_path": ..., "old_value": ..., "new_value": ...}.
    """

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = dict(copy.deepcopy(values or {}))
        self._emitter = Emitter()

    def get(self, key_path: str, default: Any = None) -> Any:
        if key_path not in self._values:
            return default
        return copy.deepcopy(self._values[key_path])

    def has(self, key_path: str) -> bool:
        return key_path in self._values

    def set(self, key_path: str, value: Any) -> None:
        old = self._values.get(key_path)
        if key_path in self._values and old == value:
            return
        self._values[key_path] = copy.deepcopy(value)
        logger.debug(f"UserConfig: {key_path} set")
        self._emitter.emit(DID_CHANGE, {"key_path": key_path, "old_value": old, "new_value": value})

    def unset(self, key_path: str) -> None:
        if key_path not in self._values:
            return
        old = self._values.pop(key_path)
        logger.debug(f"UserConfig: {key_path} unset")
        self._emitter.emit(DID_CHANGE, {"key_path": key_path, "old_value": old, "new_value": None})

    def update(self, values: Mapping[str, Any]) -> None:
        for key_path, value in values.items():
            self.set(key_path, value)

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)

    def on_did_change(self, callback: Callable[[dict[str, Any]], None]) -> Subscription:
        return self._emitter.on(DID_CHANGE, callback)
