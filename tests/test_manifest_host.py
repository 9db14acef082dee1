from cmdrouter.host.manifest import HostManifest, ManifestHost, load_manifest


def test_load_manifest(tmp_path):
    path = tmp_path / "commands.yaml"
    path.write_text(
        """
commands:
  Shop:
    description: Trading
    aliases: [Store, market]
  guild:
"""
    )
    manifest = load_manifest(path)
    assert set(manifest.commands) == {"shop", "guild"}
    assert manifest.commands["shop"].aliases == ["store", "market"]


def test_missing_manifest_declares_nothing(tmp_path, caplog):
    host = ManifestHost.from_file(tmp_path / "missing.yaml")
    assert host.declared_roots() == set()
    assert "not found" in caplog.text


def test_broken_manifest_declares_nothing(tmp_path, caplog):
    path = tmp_path / "commands.yaml"
    path.write_text("commands: [not, a, mapping")
    host = ManifestHost.from_file(path)
    assert host.declared_roots() == set()
    assert "Failed to load" in caplog.text


def test_bind_root_only_when_declared():
    host = ManifestHost(HostManifest.model_validate({"commands": {"shop": {}}}))
    executor = lambda s, label, args: True  # noqa: E731
    completer = lambda s, label, args: []  # noqa: E731
    assert host.bind_root("shop", executor, completer) is True
    assert host.bind_root("SHOP", executor, completer) is True
    assert host.bind_root("guild", executor, completer) is False
    assert host.bound_roots() == ["shop"]


def test_dispatch_passes_canonical_root(sender):
    host = ManifestHost(HostManifest.model_validate({"commands": {"shop": {"aliases": ["store"]}}}))
    seen = []
    host.bind_root("shop", lambda s, label, args: seen.append((label, args)) or True, lambda *a: [])
    assert host.dispatch(sender, "Store", ["buy"]) is True
    assert seen == [("shop", ["buy"])]
    assert host.canonical_root("STORE") == "shop"


def test_unbound_root_unhandled(sender):
    host = ManifestHost(HostManifest.model_validate({"commands": {"shop": {}}}))
    assert host.dispatch(sender, "shop", []) is False
    assert host.complete(sender, "shop", [""]) == []
    assert host.declaration("shop") is not None
