import threading
import time

from cmdrouter.commands.dispatcher import DispatchOutcome
from cmdrouter.commands.engine import CommandEngine
from cmdrouter.commands.messages import EngineMessages
from cmdrouter.config import Settings
from tests.conftest import RecordingSender


def test_execute_longest_match(engine, sender):
    calls = []
    engine.register_callback("a", lambda s, a: calls.append(("a", a)))
    engine.register_callback("a b", lambda s, a: calls.append(("a b", a)))

    assert engine.execute(sender, "a", ["b", "x"]) is True
    assert engine.execute(sender, "A", ["z"]) is True
    assert calls == [("a b", ["x"]), ("a", ["z"])]


def test_permission_gate_single_message(engine, sender):
    calls = []
    engine.register_callback("x", lambda s, a: calls.append(a), permission="x.y")
    engine.execute(sender, "x", [])
    assert calls == []
    assert sender.messages == [EngineMessages().permission_denied]


def test_handler_exception_single_message(engine, sender):
    def broken(s, a):
        raise KeyError("missing")

    engine.register_callback("broken", broken)
    assert engine.execute(sender, "broken", []) is True
    assert sender.messages == [EngineMessages().handler_error]


def test_async_execute_does_not_block(engine, sender):
    finished = threading.Event()

    def slow(s, a):
        time.sleep(0.5)
        finished.set()

    engine.register_callback("slow", slow, is_async=True)
    start = time.monotonic()
    assert engine.dispatch(sender, "slow", []) == DispatchOutcome.SUBMITTED
    assert time.monotonic() - start < 0.2
    assert engine.wait_for_in_flight(timeout=5.0)
    assert finished.is_set()


def test_no_match_lists_permitted_commands(engine):
    engine.register_callback("shop buy", lambda s, a: None, description="Buy an item")
    engine.register_callback("shop sell", lambda s, a: None)
    engine.register_callback("shop admin", lambda s, a: None, permission="shop.admin")
    sender = RecordingSender()

    assert engine.execute(sender, "shop", ["steal"]) is True
    assert sender.messages == ["Available commands:\n/shop buy - Buy an item\n/shop sell"]


def test_no_match_unknown_root(engine, sender):
    assert engine.execute(sender, "nothing", []) is False
    assert engine.dispatch(sender, "nothing", ["x"]) is None
    assert sender.messages == [EngineMessages().no_commands] * 2


class DisconnectedSender(RecordingSender):
    def send(self, text):
        raise OSError("socket closed")


def test_listing_to_failing_sender_does_not_escape(engine, caplog):
    engine.register_callback("shop buy", lambda s, a: None)

    assert engine.execute(DisconnectedSender(), "shop", ["nope"]) is True
    assert engine.execute(DisconnectedSender(), "nothing", []) is False
    assert engine.dispatch(DisconnectedSender(), "shop", ["nope"]) is None
    assert "Could not deliver message" in caplog.text


def test_help_lines_sorted(engine, sender):
    engine.register_callback("shop sell", lambda s, a: None)
    engine.register_callback("shop buy", lambda s, a: None)
    assert engine.help_lines(sender, "shop") == ["/shop buy", "/shop sell"]


def test_complete_default_and_custom(engine, sender):
    engine.register_callback("shop buy", lambda s, a: None)
    engine.register_callback("shop sell", lambda s, a: None)
    assert engine.complete(sender, "shop", [""]) == ["buy", "sell"]
    assert engine.complete(sender, "shop", ["b"]) == ["buy"]

    engine.set_completer("shop", lambda s, a: ["anything"])
    assert engine.complete(sender, "shop", ["x", "y"]) == ["anything"]


def test_failing_custom_completer_returns_empty(engine, sender):
    def broken(s, a):
        raise RuntimeError("completer failed")

    engine.set_completer("shop", broken)
    assert engine.complete(sender, "shop", [""]) == []


def test_unregister(engine, sender):
    engine.register_callback("a", lambda s, a: s.send("a"))
    engine.register_callback("a b", lambda s, a: s.send("a b"))
    assert engine.unregister("a b") is True
    engine.execute(sender, "a", ["b"])
    assert sender.messages == ["a"]


def test_root_claimed_with_host(hosted_engine, manifest_host, sender):
    hosted_engine.register_callback("shop buy", lambda s, a: s.send(f"bought {a[0]}"))
    assert manifest_host.is_bound("shop")
    assert manifest_host.dispatch(sender, "store", ["BUY", "Apple"]) is True
    assert sender.messages == ["bought Apple"]
    assert manifest_host.complete(sender, "shop", ["b"]) == ["buy"]


def test_undeclared_root_registered_but_unreachable(hosted_engine, manifest_host, sender, caplog):
    hosted_engine.register_callback("ghost", lambda s, a: s.send("boo"))
    assert "ghost" in hosted_engine.registry
    assert not manifest_host.is_bound("ghost")
    assert manifest_host.dispatch(sender, "ghost", []) is False
    assert sender.messages == []
    assert "not declared" in caplog.text

    # Still reachable through the engine itself
    hosted_engine.execute(sender, "ghost", [])
    assert sender.messages == ["boo"]


def test_from_settings():
    settings = Settings(
        worker_pool_size=1,
        completion_cache_ttl=5.0,
        permission_message="Denied!",
        error_message="Oops",
        log_file="",
    )
    engine = CommandEngine.from_settings(settings)
    try:
        assert engine.messages.permission_denied == "Denied!"
        assert engine.messages.handler_error == "Oops"
        sender = RecordingSender()
        engine.register_callback("p", lambda s, a: None, permission="perm")
        engine.execute(sender, "p", [])
        assert sender.messages == ["Denied!"]
    finally:
        engine.shutdown()


def test_shutdown_stops_accepting(sender):
    engine = CommandEngine(max_workers=1)
    calls = []
    engine.register_callback("a", lambda s, a: calls.append(a), is_async=True)
    engine.shutdown(wait=True)
    assert engine.dispatch(sender, "a", []) == DispatchOutcome.REJECTED
    assert calls == []
