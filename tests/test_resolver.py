from cmdrouter.commands.models import CallbackBinding, CommandDescriptor, Matched, NoMatch
from cmdrouter.commands.registry import CommandRegistry
from cmdrouter.commands.resolver import CommandResolver


def noop(sender, args):
    pass


def make_resolver(*paths: str) -> CommandResolver:
    registry = CommandRegistry()
    for path in paths:
        registry.register(CommandDescriptor(path=path), CallbackBinding(noop))
    return CommandResolver(registry)


def test_longest_match_wins():
    resolver = make_resolver("a", "a b")
    result = resolver.resolve("a", ["b", "x"])
    assert isinstance(result, Matched)
    assert result.entry.path == "a b"
    assert result.remaining_args == ["x"]


def test_falls_back_to_shorter_path():
    resolver = make_resolver("a", "a b")
    result = resolver.resolve("a", ["z"])
    assert isinstance(result, Matched)
    assert result.entry.path == "a"
    assert result.remaining_args == ["z"]


def test_registration_order_irrelevant():
    first = make_resolver("a b c", "a b").resolve("a", ["b", "c", "d"])
    second = make_resolver("a b", "a b c").resolve("a", ["b", "c", "d"])
    assert first.entry.path == second.entry.path == "a b c"
    assert first.remaining_args == second.remaining_args == ["d"]


def test_case_insensitive_match():
    resolver = make_resolver("a b")
    result = resolver.resolve("A", ["B"])
    assert isinstance(result, Matched)
    assert result.entry.path == "a b"
    assert result.remaining_args == []


def test_remaining_args_keep_caller_casing():
    resolver = make_resolver("guild invite")
    result = resolver.resolve("Guild", ["INVITE", "Notch", "MiXeD"])
    assert result.remaining_args == ["Notch", "MiXeD"]
    assert result.label == "Guild"


def test_empty_args_probe_root():
    resolver = make_resolver("shop")
    result = resolver.resolve("shop", [])
    assert isinstance(result, Matched)
    assert result.entry.path == "shop"
    assert result.remaining_args == []


def test_sub_command_without_root_command():
    resolver = make_resolver("shop buy")
    assert isinstance(resolver.resolve("shop", []), NoMatch)
    assert isinstance(resolver.resolve("shop", ["sell"]), NoMatch)


def test_unknown_root():
    resolver = make_resolver("shop")
    result = resolver.resolve("Nothing", ["here"])
    assert isinstance(result, NoMatch)
    assert result.root == "nothing"
    assert result.args == ["here"]


def test_unregistered_path_no_longer_resolves():
    registry = CommandRegistry()
    registry.register(CommandDescriptor(path="a"), CallbackBinding(noop))
    registry.register(CommandDescriptor(path="a b"), CallbackBinding(noop))
    resolver = CommandResolver(registry)
    registry.unregister("a b")
    result = resolver.resolve("a", ["b"])
    assert result.entry.path == "a"
    assert result.remaining_args == ["b"]


def test_token_with_whitespace_is_not_split():
    resolver = make_resolver("a", "a b c")
    result = resolver.resolve("a", ["b c"])
    assert result.entry.path == "a"
    assert result.remaining_args == ["b c"]
    assert isinstance(make_resolver("a b c").resolve("a", ["b c"]), NoMatch)


def test_blank_token_stops_probing():
    resolver = make_resolver("a", "a b")
    result = resolver.resolve("a", ["", "b"])
    assert result.entry.path == "a"
    assert result.remaining_args == ["", "b"]
