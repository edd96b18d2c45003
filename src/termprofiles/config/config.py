from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from termprofiles.core.defaults import default_user_data_path


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if not raw:
        return None
    return float(raw)


env_override = os.getenv("TERMPROFILES_ENV_PATH")
if env_override and os.path.exists(env_override):
    load_dotenv(env_override, override=True)
else:
    found = find_dotenv(filename=".env", usecwd=True)
    if found:
        load_dotenv(found, override=False)


class Settings(BaseModel):
    user_data_path: str = Field(default=os.getenv("TERMPROFILES_USER_DATA_PATH") or default_user_data_path())
    profiles_filename: str = os.getenv("TERMPROFILES_PROFILES_FILENAME", "profiles.json")

    # None waits on the backend forever
    load_timeout_sec: float | None = _env_float("TERMPROFILES_LOAD_TIMEOUT_SEC")

    # Overwrite a profiles file that exists but cannot be read (permissions etc.)
    recover_unreadable_profiles: bool = _env_flag("TERMPROFILES_RECOVER_UNREADABLE")

    @property
    def profiles_path(self) -> Path:
        return Path(self.user_data_path) / self.profiles_filename


settings = Settings()
