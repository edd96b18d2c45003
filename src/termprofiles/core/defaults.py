from __future__ import annotations

import os
import sys
from pathlib import Path

from platformdirs import user_config_dir

APP_DIR_NAME = "x-terminal"

IS_WINDOWS = sys.platform.startswith("win")


def default_shell_command() -> str:
    if IS_WINDOWS:
        return os.getenv("COMSPEC", "cmd.exe")
    return os.getenv("SHELL", "/bin/sh")


def default_cwd() -> str:
    return str(Path.home())


def default_user_data_path() -> str:
    """Directory holding profiles.json (per-user config dir, roaming on Windows)."""
    return user_config_dir(APP_DIR_NAME, appauthor=False, roaming=True)
