# termprofiles/core/profiles.py
from __future__ import annotations

import copy
import uuid
from collections.abc import Callable, Mapping, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit

from loguru import logger

from termprofiles.config.config import settings
from termprofiles.core.events import DID_RELOAD_PROFILES, DID_RESET_BASE_PROFILE, Emitter, Subscription
from termprofiles.core.errors import (
    PersistenceReadError,
    ProfilesFileCorruptError,
    ProfilesFileMissingError,
)
from termprofiles.core.load_gate import GateState, LoadGate
from termprofiles.core.schema import CONFIG_DATA, USER_CONFIG, FieldDescriptor, profile_keys
from termprofiles.storage.json_backend import JsonFileBackend

X_TERMINAL_BASE_URI = "x-terminal://"

Profile = dict[str, Any]
ProfileCollection = dict[str, Profile]


class _ProfilesStore:
    """
    In-memory mirror of profiles.json plus the derived base profile.

    Every read/write of the collection waits until profiles have been loaded
    at least once. The collection is only ever replaced wholesale, after the
    durable write succeeded, so readers see the old or the new one.

    Construct through get_profiles_store().
    """

    def __init__(
        self,
        backend: JsonFileBackend,
        config_data: Sequence[FieldDescriptor] = CONFIG_DATA,
        *,
        load_timeout_sec: float | None = None,
        recover_unreadable: bool = False,
    ):
        self.backend = backend
        self.config_data = tuple(config_data)
        self._profile_keys = profile_keys(self.config_data)
        self.load_timeout_sec = load_timeout_sec
        self.recover_unreadable = recover_unreadable

        self.emitter = Emitter()
        self.profiles: ProfileCollection = {}
        self.previous_base_profile: Profile | None = None
        self.base_profile: Profile = self.get_default_profile()
        self.reset_base_profile()
        self._gate = LoadGate()
        self._subscriptions: list[Subscription] = []

    @property
    def profiles_path(self) -> Path:
        return self.backend.path

    @property
    def state(self) -> GateState:
        return self._gate.state

    # ---------- loading ----------
    async def _wait_loaded(self) -> None:
        if self._gate.state is GateState.UNINITIALIZED:
            await self.reload_profiles()
            return
        await self._gate.wait(self.load_timeout_sec)

    async def reload_profiles(self) -> None:
        token = self._gate.arm()
        try:
            try:
                data = await self.backend.read_json()
            except ProfilesFileMissingError:
                logger.info(f"Profiles: no {self.profiles_path.name} yet, creating an empty one")
                await self.update_profiles({})
            except ProfilesFileCorruptError as e:
                logger.warning(f"Profiles: {e}; starting with no profiles")
                await self._recover_unreadable()
            except PersistenceReadError as e:
                if self.recover_unreadable:
                    logger.warning(f"Profiles: {e}; overwriting with an empty collection")
                    await self.update_profiles({})
                else:
                    logger.error(f"Profiles: {e}; leaving the file untouched")
                    self.profiles = {}
            else:
                self.profiles = self.sort_profiles(data)
                logger.info(f"Profiles: loaded {len(self.profiles)} profile(s) from {self.profiles_path}")
            self.emitter.emit(DID_RELOAD_PROFILES, self._get_sanitized_profiles_data())
        finally:
            self._gate.release(token)

    async def _recover_unreadable(self) -> None:
        try:
            await self.backend.backup_unreadable()
        except OSError as e:
            logger.error(f"Profiles: could not back up {self.profiles_path}: {e}; leaving the file untouched")
            self.profiles = {}
            return
        await self.update_profiles({})

    def on_did_reload_profiles(self, callback: Callable[[ProfileCollection], None]) -> Subscription:
        return self.emitter.on(DID_RELOAD_PROFILES, callback)

    def on_did_reset_base_profile(self, callback: Callable[[Profile], None]) -> Subscription:
        return self.emitter.on(DID_RESET_BASE_PROFILE, callback)

    def track(self, subscription: Subscription) -> Subscription:
        """Dispose `subscription` together with the store."""
        self._subscriptions.append(subscription)
        return subscription

    def dispose(self) -> None:
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        self.emitter.clear()

    # ---------- persistence ----------
    @staticmethod
    def sort_profiles(profiles: Mapping[str, Profile]) -> ProfileCollection:
        return {name: profiles[name] for name in sorted(profiles)}

    async def update_profiles(self, new_profiles: Mapping[str, Profile]) -> None:
        new_profiles = self.sort_profiles(new_profiles)
        await self.backend.ensure_dir()
        await self.backend.write_json(new_profiles)
        self.profiles = new_profiles

    # ---------- base profile ----------
    def get_default_profile(self) -> Profile:
        return {f.profile_key: f.default_value() for f in self.config_data if f.in_profile}

    def get_base_profile(self) -> Profile:
        return copy.deepcopy(self.base_profile)

    def reset_base_profile(self) -> None:
        self.previous_base_profile = copy.deepcopy(self.base_profile)
        self.base_profile = {
            f.profile_key: f.to_base_profile(self.previous_base_profile.get(f.profile_key))
            for f in self.config_data
            if f.in_profile
        }
        logger.debug("Profiles: base profile reset")
        self.emitter.emit(DID_RESET_BASE_PROFILE, self.get_base_profile())

    # ---------- sanitizing ----------
    def sanitize_data(self, data: Mapping[str, Any]) -> Profile:
        if not isinstance(data, Mapping):
            return {}
        return copy.deepcopy({key: data[key] for key in self._profile_keys if key in data})

    def _get_sanitized_profiles_data(self) -> ProfileCollection:
        return {name: self.sanitize_data(profile) for name, profile in self.profiles.items()}

    @staticmethod
    def diff_profiles(old_profile: Mapping[str, Any], new_profile: Mapping[str, Any]) -> Profile:
        """Keys added or changed in `new_profile`; removed keys are not reported."""
        return {
            key: copy.deepcopy(value)
            for key, value in new_profile.items()
            if key not in old_profile or old_profile[key] != value
        }

    # ---------- CRUD ----------
    async def get_profiles(self) -> ProfileCollection:
        await self._wait_loaded()
        return self._get_sanitized_profiles_data()

    async def get_profile(self, profile_name: str) -> Profile:
        await self._wait_loaded()
        return {
            **copy.deepcopy(self.base_profile),
            **self.sanitize_data(self.profiles.get(profile_name) or {}),
        }

    async def is_profile_exists(self, profile_name: str) -> bool:
        await self._wait_loaded()
        return profile_name in self.profiles

    async def set_profile(self, profile_name: str, data: Mapping[str, Any]) -> None:
        await self._wait_loaded()
        profile_data = {
            **copy.deepcopy(self.base_profile),
            **self.sanitize_data(data),
        }
        new_profiles = copy.deepcopy(self.profiles)
        new_profiles[profile_name] = profile_data
        await self.update_profiles(new_profiles)
        logger.info(f"Profiles: saved '{profile_name}'")

    async def delete_profile(self, profile_name: str) -> None:
        await self._wait_loaded()
        new_profiles = copy.deepcopy(self.profiles)
        new_profiles.pop(profile_name, None)
        await self.update_profiles(new_profiles)
        logger.info(f"Profiles: deleted '{profile_name}'")

    # ---------- URIs ----------
    @staticmethod
    def generate_new_uri() -> str:
        return f"{X_TERMINAL_BASE_URI}{uuid.uuid4()}/"

    def generate_new_url_from_profile_data(self, data: Mapping[str, Any]) -> str:
        data = self.sanitize_data(data)
        params = [
            (f.profile_key, f.to_url_param(data[f.profile_key]))
            for f in self.config_data
            if f.in_profile and f.profile_key in data
        ]
        uri = self.generate_new_uri()
        return f"{uri}?{urlencode(params)}" if params else uri

    def create_profile_data_from_uri(self, uri: str) -> Profile:
        query = parse_qs(urlsplit(uri).query, keep_blank_values=True)
        base_profile = self.get_base_profile()
        profile: Profile = {}
        for f in self.config_data:
            if not f.in_profile:
                continue
            key = f.profile_key
            param = query.get(key, [""])[0]
            if not param:
                profile[key] = base_profile[key]
                continue
            try:
                value = f.from_url_param(param)
            except (TypeError, ValueError, RecursionError) as e:
                logger.warning(f"Profiles: cannot decode '{key}' from URI ({e}); using base profile value")
                profile[key] = base_profile[key]
                continue
            if not f.check_url_param(value):
                logger.warning(f"Profiles: rejected '{key}'={value!r} from URI; using base profile value")
                profile[key] = base_profile[key]
                continue
            profile[key] = value
        return profile


@lru_cache(maxsize=None)
def get_profiles_store() -> _ProfilesStore:
    """Process-wide profile store, built on first use."""
    store = _ProfilesStore(
        JsonFileBackend(settings.profiles_path),
        CONFIG_DATA,
        load_timeout_sec=settings.load_timeout_sec,
        recover_unreadable=settings.recover_unreadable_profiles,
    )
    # base profile follows user config edits
    store.track(USER_CONFIG.on_did_change(lambda _change: store.reset_base_profile()))
    logger.info(f"Profiles: store ready at {store.profiles_path}")
    return store


def reset_profiles_store() -> None:
    """Dispose the shared store (if built) and drop it; the next get_profiles_store() builds a fresh one."""
    if get_profiles_store.cache_info().currsize:
        get_profiles_store().dispose()
    get_profiles_store.cache_clear()
