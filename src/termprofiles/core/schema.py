"""
Terminal configuration schema.

Each FieldDescriptor ties a user config key path to a profile key, its default,
and the transforms the profile store needs: deriving the base profile from user
config, and encoding/decoding/validating the value as a URI query parameter.

Transforms are always present. Anything not given at construction falls back to
identity (encode/decode) or always-valid (check), so callers iterate the table
without special cases.
"""

from __future__ import annotations

import copy
import json
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from termprofiles.core.defaults import default_cwd, default_shell_command
from termprofiles.core.user_config import UserConfig

MINIMUM_FONT_SIZE = 8
MAXIMUM_FONT_SIZE = 100


def _identity(value: Any) -> Any:
    return value


def _always_valid(_value: Any) -> bool:
    return True


@dataclass(frozen=True)
class FieldDescriptor:
    profile_key: str
    key_path: str
    default_profile_value: Any
    in_profile: bool = True
    to_base_profile: Callable[[Any], Any] = field(default=_identity, compare=False)
    to_url_param: Callable[[Any], str] = field(default=_identity, compare=False)
    from_url_param: Callable[[str], Any] = field(default=_identity, compare=False)
    check_url_param: Callable[[Any], bool] = field(default=_always_valid, compare=False)

    def default_value(self) -> Any:
        return copy.deepcopy(self.default_profile_value)


# ---------- validators ----------
def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_optional_str(value: Any) -> bool:
    return value is None or isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _is_str_dict(value: Any) -> bool:
    return isinstance(value, dict) and all(isinstance(k, str) and isinstance(v, str) for k, v in value.items())


def _is_optional_str_dict(value: Any) -> bool:
    return value is None or _is_str_dict(value)


def _is_font_size(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return MINIMUM_FONT_SIZE <= value <= MAXIMUM_FONT_SIZE


# ---------- base profile coercion ----------
def _coerce(check: Callable[[Any], bool], *, json_string: bool = False) -> Callable[[Any], Any]:
    """Build a coercer for a user config value; raises ValueError if unusable."""

    def coerce(value: Any) -> Any:
        if json_string and isinstance(value, str):
            value = json.loads(value)
        if not check(value):
            raise ValueError(f"invalid value {value!r}")
        return value

    return coerce


def _from_user_config(
    user_config: UserConfig,
    key_path: str,
    default: Any,
    coerce: Callable[[Any], Any],
) -> Callable[[Any], Any]:
    def to_base_profile(previous: Any) -> Any:
        if not user_config.has(key_path):
            return copy.deepcopy(default)
        raw = user_config.get(key_path)
        try:
            return coerce(raw)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Schema: ignoring user config {key_path}={raw!r} ({e}); keeping previous value")
            return copy.deepcopy(previous)

    return to_base_profile


def _string_field(user_config: UserConfig, profile_key: str, key_path: str, default: str) -> FieldDescriptor:
    return FieldDescriptor(
        profile_key=profile_key,
        key_path=key_path,
        default_profile_value=default,
        to_base_profile=_from_user_config(user_config, key_path, default, _coerce(_is_non_empty_str)),
        check_url_param=_is_non_empty_str,
    )


def _json_field(
    user_config: UserConfig,
    profile_key: str,
    key_path: str,
    default: Any,
    check: Callable[[Any], bool],
    *,
    json_string: bool = False,
    in_profile: bool = True,
) -> FieldDescriptor:
    return FieldDescriptor(
        profile_key=profile_key,
        key_path=key_path,
        default_profile_value=default,
        in_profile=in_profile,
        to_base_profile=_from_user_config(user_config, key_path, default, _coerce(check, json_string=json_string)),
        to_url_param=json.dumps,
        from_url_param=json.loads,
        check_url_param=check,
    )


def build_config_data(user_config: UserConfig) -> tuple[FieldDescriptor, ...]:
    """Ordered field table; base-profile transforms read `user_config` on every call."""
    uc = user_config
    return (
        _string_field(uc, "name", "profile.name", "x-terminal"),
        # spawn
        _string_field(uc, "shell_command", "spawn.command", default_shell_command()),
        _json_field(uc, "args", "spawn.args", [], _is_str_list, json_string=True),
        _string_field(uc, "term_type", "spawn.term_type", "xterm-256color"),
        _string_field(uc, "cwd", "spawn.cwd", default_cwd()),
        _json_field(uc, "env", "spawn.env", None, _is_optional_str_dict, json_string=True),
        _json_field(uc, "set_env", "spawn.set_env", {}, _is_str_dict, json_string=True),
        _json_field(uc, "delete_env", "spawn.delete_env", [], _is_str_list, json_string=True),
        _json_field(uc, "encoding", "spawn.encoding", None, _is_optional_str),
        # terminal
        _json_field(uc, "font_size", "terminal.font_size", 14, _is_font_size),
        _json_field(uc, "minimum_font_size", "terminal.minimum_font_size", MINIMUM_FONT_SIZE, _is_font_size, in_profile=False),
        _json_field(uc, "maximum_font_size", "terminal.maximum_font_size", MAXIMUM_FONT_SIZE, _is_font_size, in_profile=False),
        _json_field(uc, "use_editor_font", "terminal.use_editor_font", True, _is_bool),
        _string_field(uc, "font_family", "terminal.font_family", "monospace"),
        _string_field(uc, "theme", "terminal.theme", "Custom"),
        _json_field(uc, "title", "terminal.title", None, _is_optional_str),
        # behavior
        _json_field(uc, "leave_open_after_exit", "behavior.leave_open_after_exit", True, _is_bool),
        _json_field(uc, "relaunch_on_startup", "behavior.relaunch_on_startup", True, _is_bool),
        _json_field(uc, "prompt_to_startup", "behavior.prompt_to_startup", False, _is_bool),
        _json_field(uc, "copy_on_select", "behavior.copy_on_select", False, _is_bool),
    )


def config_keys_to_profile(config_data: Sequence[FieldDescriptor]) -> dict[str, str]:
    return {f.key_path: f.profile_key for f in config_data if f.in_profile}


def profile_keys(config_data: Sequence[FieldDescriptor]) -> tuple[str, ...]:
    return tuple(f.profile_key for f in config_data if f.in_profile)


USER_CONFIG = UserConfig()
CONFIG_DATA = build_config_data(USER_CONFIG)
