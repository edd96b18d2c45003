from __future__ import annotations

from pathlib import Path


class ProfileStoreError(Exception):
    """Base class for profile store failures."""


class PersistenceReadError(ProfileStoreError):
    def __init__(self, path: Path | str, reason: str):
        super().__init__(f"cannot read profiles from {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class ProfilesFileMissingError(PersistenceReadError):
    pass


class ProfilesFileCorruptError(PersistenceReadError):
    pass


class PersistenceWriteError(ProfileStoreError):
    def __init__(self, path: Path | str, reason: str):
        super().__init__(f"cannot write profiles to {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class ProfilesLoadTimeoutError(ProfileStoreError):
    def __init__(self, timeout: float):
        super().__init__(f"profiles were not loaded within {timeout:g}s")
        self.timeout = timeout
