from __future__ import annotations

from importlib import import_module


def test_dunder_all_exports() -> None:
    module = import_module("reviewbridge")
    exported = set(module.__all__)
    expected = {
        "ReviewBridge",
        "BatchRunner",
        "BridgeConfig",
        "load_config",
        "resolve_keys",
        "split_fields",
        "__version__",
    }
    assert expected <= exported
    for name in exported:
        assert hasattr(module, name)
