# tests/core/test_profile_uri.py

from __future__ import annotations

import re
from urllib.parse import parse_qs, quote, urlsplit

from termprofiles.core.profiles import X_TERMINAL_BASE_URI

URI_RE = re.compile(r"^x-terminal://[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}/$")


def test_generate_new_uri_shape_and_uniqueness(store):
    uris = {store.generate_new_uri() for _ in range(200)}

    assert len(uris) == 200
    assert all(URI_RE.match(u) for u in uris)
    assert all(u.startswith(X_TERMINAL_BASE_URI) for u in uris)


def test_url_only_carries_present_profile_fields(store):
    url = store.generate_new_url_from_profile_data(
        {"shell_command": "/bin/zsh", "minimum_font_size": 10, "junk": "x"}
    )

    query = parse_qs(urlsplit(url).query)
    assert query == {"shell_command": ["/bin/zsh"]}


def test_url_without_fields_has_no_query(store):
    url = store.generate_new_url_from_profile_data({})

    assert URI_RE.match(url)


def test_round_trip_preserves_sanitized_values(store):
    data = {
        "name": "work",
        "shell_command": "/bin/bash -c 'echo a&b=c'",
        "args": ["-l", "--login"],
        "cwd": "/home/me/src",
        "env": None,
        "set_env": {"LANG": "en_US.UTF-8"},
        "delete_env": ["NODE_ENV"],
        "encoding": "utf-8",
        "font_size": 15.5,
        "use_editor_font": False,
        "title": None,
        "copy_on_select": True,
    }

    decoded = store.create_profile_data_from_uri(store.generate_new_url_from_profile_data(data))

    base = store.get_base_profile()
    for key, value in decoded.items():
        assert value == data.get(key, base[key]), key
    assert set(decoded) == set(base)


def test_missing_fields_resolve_to_base_profile(store):
    decoded = store.create_profile_data_from_uri(store.generate_new_uri())

    assert decoded == store.get_base_profile()


def test_invalid_params_fall_back_to_base_profile(store):
    base = store.get_base_profile()
    uri = (
        store.generate_new_uri()
        + "?font_size=1000&use_editor_font=maybe&args=%7Bbroken&set_env=%5B%5D&title=42&theme=Nord"
    )

    decoded = store.create_profile_data_from_uri(uri)

    assert decoded["font_size"] == base["font_size"]
    assert decoded["use_editor_font"] == base["use_editor_font"]
    assert decoded["args"] == base["args"]
    assert decoded["set_env"] == base["set_env"]
    assert decoded["title"] == base["title"]
    assert decoded["theme"] == "Nord"


def test_deeply_nested_json_param_falls_back_to_base_profile(store):
    base = store.get_base_profile()
    uri = store.generate_new_uri() + "?args=" + quote("[" * 100000) + "&set_env=" + quote('{"a":' * 100000)

    decoded = store.create_profile_data_from_uri(uri)

    assert decoded["args"] == base["args"]
    assert decoded["set_env"] == base["set_env"]


def test_empty_param_falls_back_to_base_profile(store):
    decoded = store.create_profile_data_from_uri(store.generate_new_uri() + "?cwd=&shell_command=")
    base = store.get_base_profile()

    assert decoded["cwd"] == base["cwd"]
    assert decoded["shell_command"] == base["shell_command"]


def test_decode_uses_current_base_profile(store, user_config):
    user_config.set("terminal.font_family", "Fira Code")
    store.reset_base_profile()

    decoded = store.create_profile_data_from_uri(store.generate_new_uri() + "?font_size=nan")

    assert decoded["font_family"] == "Fira Code"
    assert decoded["font_size"] == 14
