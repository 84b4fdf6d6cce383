from __future__ import annotations

import json
from pathlib import Path

from extension_suite.host import (
    HostApiShimFactory,
    JsonFileSettingsStore,
    MemorySettingsStore,
    get_host_api,
)


def test_settings_are_namespaced_per_unit() -> None:
    store = MemorySettingsStore()
    factory = HostApiShimFactory(store)
    unit_a = factory.create("a")
    unit_b = factory.create("b")

    unit_a.settings.set("k", "v1")
    unit_b.settings.set("k", "v2")

    assert unit_a.settings.get("k") == "v1"
    assert unit_b.settings.get("k") == "v2"
    assert store.get("a:k") == "v1"
    assert store.get("b:k") == "v2"


def test_settings_values_are_stored_as_strings_and_last_write_wins() -> None:
    shim = HostApiShimFactory(MemorySettingsStore()).create("weekly")
    shim.settings.set("start-day", 1)
    shim.settings.set("start-day", 0)
    assert shim.settings.get("start-day") == "0"
    assert shim.settings.get("missing") is None


def test_ui_operations_are_inert_and_recorded() -> None:
    shim = HostApiShimFactory(MemorySettingsStore()).create("monthly")

    command = shim.ui.command_palette.add_command({"label": "Open month"})
    removed = shim.ui.command_palette.remove_command(command)
    button = shim.ui.create_button({"label": "Today"})
    shown = shim.ui.show_notification("Ready", "success")
    panel = shim.settings.panel.create({"tabTitle": "Monthly"})

    assert command.kind == "command"
    assert command.config == {"label": "Open month"}
    assert command.id.startswith("monthly:command:")
    assert removed is True
    assert button.kind == "button"
    assert button.id != command.id
    assert shown is True
    assert panel.kind == "panel"
    assert [call.method for call in shim.calls] == [
        "ui.command_palette.add_command",
        "ui.command_palette.remove_command",
        "ui.create_button",
        "ui.show_notification",
        "settings.panel.create",
    ]


def test_shim_operations_tolerate_unusual_arguments() -> None:
    shim = HostApiShimFactory(MemorySettingsStore()).create("modal")
    assert shim.ui.command_palette.add_command().config == {}
    assert shim.ui.create_button("plain").config == {"value": "plain"}
    assert shim.ui.show_notification() is True
    assert shim.ui.command_palette.remove_command("unknown") is True


def test_session_exposes_shim_ambiently_and_releases_it() -> None:
    factory = HostApiShimFactory(MemorySettingsStore())
    assert get_host_api() is None
    with factory.session("foundation") as shim:
        assert get_host_api() is shim
        assert shim.released is False
    assert get_host_api() is None
    assert shim.released is True


def test_session_releases_on_error() -> None:
    factory = HostApiShimFactory(MemorySettingsStore())
    captured = []
    try:
        with factory.session("foundation") as shim:
            captured.append(shim)
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert get_host_api() is None
    assert captured[0].released is True


def test_released_shim_keeps_working_against_the_store() -> None:
    store = MemorySettingsStore()
    factory = HostApiShimFactory(store)
    with factory.session("yearly") as shim:
        pass
    shim.settings.set("late", "yes")
    assert store.get("yearly:late") == "yes"


def test_json_file_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "state" / "settings.json"
    first = HostApiShimFactory(JsonFileSettingsStore(path)).create("config")
    first.settings.set("theme", "dark")

    assert json.loads(path.read_text(encoding="utf-8")) == {"config:theme": "dark"}
    reopened = JsonFileSettingsStore(path)
    assert reopened.get("config:theme") == "dark"


def test_json_file_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileSettingsStore(path)
    assert store.get("a:k") is None
    store.set("a:k", "v")
    assert JsonFileSettingsStore(path).get("a:k") == "v"


def test_json_file_store_removes_temp_file_when_write_fails(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    store = JsonFileSettingsStore(path)
    path.mkdir()

    store.set("a:k", "v")

    assert store.get("a:k") == "v"
    assert [entry.name for entry in tmp_path.iterdir()] == ["settings.json"]
