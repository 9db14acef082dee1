import sys

import pytest

from cmdrouter.commands.loader import load_command_modules


@pytest.fixture
def plugin_dir(tmp_path, monkeypatch):
    monkeypatch.syspath_prepend(str(tmp_path))
    yield tmp_path
    for name in ("good_plugin", "bad_plugin", "inert_plugin"):
        sys.modules.pop(name, None)


def test_load_command_modules(engine, plugin_dir, sender):
    (plugin_dir / "good_plugin.py").write_text(
        "def register(engine):\n"
        "    engine.register_callback('hello', lambda s, a: s.send('hi'))\n"
    )
    (plugin_dir / "bad_plugin.py").write_text(
        "def register(engine):\n"
        "    raise RuntimeError('cannot register')\n"
    )
    (plugin_dir / "inert_plugin.py").write_text("VALUE = 1\n")

    loaded = load_command_modules(
        engine, ["good_plugin", "bad_plugin", "inert_plugin", "missing_plugin_xyz"]
    )
    assert loaded == ["good_plugin"]

    engine.execute(sender, "hello", [])
    assert sender.messages == ["hi"]
