from __future__ import annotations

import linecache
import sys
import traceback

import pytest
from extension_suite.errors import LoadError
from extension_suite.host import HostApiShimFactory, MemorySettingsStore
from extension_suite.loading import ModuleArtifact, SandboxedLoader


def _shim(unit_id: str = "foundation"):
    return HostApiShimFactory(MemorySettingsStore()).create(unit_id)


def test_load_evaluates_source_into_isolated_module() -> None:
    source = "VALUE = 40 + 2\n\ndef onload(host_api):\n    return VALUE\n"
    module = SandboxedLoader().load("foundation", source, _shim())

    assert module.VALUE == 42
    assert module.__name__ == "extension_suite.units.foundation"
    assert module.__name__ not in sys.modules
    assert "VALUE" not in globals()


def test_load_binds_host_api_in_module_globals() -> None:
    shim = _shim("config")
    source = "extension_api.settings.set('booted', 'yes')\nSEEN = extension_api\n"
    module = SandboxedLoader().load("config", source, shim)

    assert module.SEEN is shim
    assert shim.settings.get("booted") == "yes"


def test_units_do_not_share_namespaces() -> None:
    loader = SandboxedLoader()
    first = loader.load("a", "counter = 1\n", _shim("a"))
    second = loader.load("b", "counter = globals().get('counter', 0) + 10\n", _shim("b"))
    assert first.counter == 1
    assert second.counter == 10


def test_load_wraps_runtime_error() -> None:
    with pytest.raises(LoadError, match="ZeroDivisionError") as info:
        SandboxedLoader().load("monthly", "1 / 0\n", _shim("monthly"))
    assert isinstance(info.value.__cause__, ZeroDivisionError)
    assert info.value.cause is info.value.__cause__
    assert info.value.unit_id == "monthly"


def test_load_wraps_syntax_error() -> None:
    with pytest.raises(LoadError) as info:
        SandboxedLoader().load("weekly", "export default {\n", _shim("weekly"))
    assert isinstance(info.value.__cause__, SyntaxError)


def test_artifact_is_released_after_success_and_failure() -> None:
    loader = SandboxedLoader()
    ok = ModuleArtifact(unit_id="ok", source="x = 1\n")
    bad = ModuleArtifact(unit_id="bad", source="raise RuntimeError('boom')\n")

    loader.load(ok.unit_id, ok.source)
    with pytest.raises(LoadError):
        loader.load(bad.unit_id, bad.source)

    assert ok.filename not in linecache.cache
    assert bad.filename not in linecache.cache


def test_traceback_points_at_unit_source() -> None:
    source = "def explode():\n    raise ValueError('from unit')\n\nexplode()\n"
    with pytest.raises(LoadError) as info:
        SandboxedLoader().load("yearly", source, _shim("yearly"))
    frames = traceback.extract_tb(info.value.__cause__.__traceback__)
    assert frames[-1].filename == "<extension:yearly>"
    assert frames[-1].lineno == 2


def test_artifact_naming() -> None:
    artifact = ModuleArtifact(unit_id="weekly-view.v2", source="")
    assert artifact.module_name == "extension_suite.units.weekly_view_v2"
    assert artifact.filename == "<extension:weekly-view.v2>"
    assert artifact.media_type == "text/x-python"


def test_dataclass_with_deferred_annotations_loads() -> None:
    source = (
        "from __future__ import annotations\n"
        "from dataclasses import dataclass, field\n\n"
        "@dataclass\n"
        "class View:\n"
        "    name: str\n"
        "    days: list[int] = field(default_factory=list)\n\n"
        "WEEK = View('week', [1, 2, 3, 4, 5, 6, 7])\n"
    )
    module = SandboxedLoader().load("weekly", source, _shim("weekly"))

    assert module.WEEK.days[-1] == 7
    assert module.__name__ not in sys.modules


def test_module_name_is_unregistered_after_failure() -> None:
    with pytest.raises(LoadError):
        SandboxedLoader().load("bandaid", "raise RuntimeError('patch failed')\n")
    assert "extension_suite.units.bandaid" not in sys.modules


def test_sys_exit_at_top_level_becomes_load_error() -> None:
    with pytest.raises(LoadError, match="SystemExit") as info:
        SandboxedLoader().load("modal", "import sys\nsys.exit(1)\n")
    assert isinstance(info.value.cause, SystemExit)
