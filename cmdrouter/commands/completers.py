"""Fluent builder for per-root tab completers.

Example::

    completer = (
        CompleterBuilder()
        .arg(0, ["buy", "sell"])
        .numbers(1, 1, 64)
        .if_permission(2, "shop.admin", ["force"])
        .require_permission("shop.use")
        .build()
    )
    engine.set_completer("shop", completer)

Argument indexes are zero-based and count the arguments after the root.
Suggestions are narrowed to the partial last token, de-duplicated and sorted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Union

from cmdrouter.commands.completion import Completer
from cmdrouter.commands.sender import Sender, is_interactive

logger = logging.getLogger(__name__)

Suggestions = Union[Iterable[str], Callable[[Sender], Iterable[str]]]
Condition = Callable[[Sender, list[str]], bool]


def _as_source(values: Suggestions) -> Callable[[Sender], Iterable[str]]:
    if callable(values):
        return values
    frozen = list(values)
    return lambda _sender: frozen


def filter_suggestions(suggestions: Iterable[str], args: list[str]) -> list[str]:
    """Keep suggestions starting with the last argument, case-insensitively."""
    partial = args[-1].lower() if args else ""
    return sorted({s for s in suggestions if s is not None and s.lower().startswith(partial)})


class CompleterBuilder:
    def __init__(self) -> None:
        self._args: dict[int, Callable[[Sender], Iterable[str]]] = {}
        self._conditionals: dict[int, list[tuple[Condition, Callable[[Sender], Iterable[str]]]]] = {}
        self._default: Callable[[Sender], Iterable[str]] | None = None
        self._filters: list[Callable[[Sender], bool]] = []

    def arg(self, index: int, values: Suggestions) -> CompleterBuilder:
        if index >= 0:
            self._args[index] = _as_source(values)
        return self

    def conditional(self, index: int, condition: Condition, values: Suggestions) -> CompleterBuilder:
        if index >= 0:
            self._conditionals.setdefault(index, []).append((condition, _as_source(values)))
        return self

    def if_permission(self, index: int, permission: str, values: Suggestions) -> CompleterBuilder:
        return self.conditional(
            index, lambda sender, _args: sender.has_permission(permission), values
        )

    def if_interactive(self, index: int, values: Suggestions) -> CompleterBuilder:
        return self.conditional(index, lambda sender, _args: is_interactive(sender), values)

    def numbers(self, index: int, low: int, high: int) -> CompleterBuilder:
        return self.arg(index, [str(n) for n in range(low, high + 1)])

    def booleans(self, index: int) -> CompleterBuilder:
        return self.arg(index, ["true", "false"])

    def default_to(self, values: Suggestions) -> CompleterBuilder:
        self._default = _as_source(values)
        return self

    def require_permission(self, permission: str) -> CompleterBuilder:
        self._filters.append(lambda sender: sender.has_permission(permission))
        return self

    def require(self, predicate: Callable[[Sender], bool]) -> CompleterBuilder:
        self._filters.append(predicate)
        return self

    def build(self) -> Completer:
        def complete(sender: Sender, args: list[str]) -> list[str]:
            if not all(f(sender) for f in self._filters):
                return []
            try:
                return self._complete(sender, args)
            except Exception:
                logger.debug("Completion source failed for args %s", args, exc_info=True)
                return []

        return complete

    def _complete(self, sender: Sender, args: list[str]) -> list[str]:
        index = len(args) - 1

        for condition, source in self._conditionals.get(index, []):
            if condition(sender, args):
                result = filter_suggestions(source(sender), args)
                if result:
                    return result

        source = self._args.get(index)
        if source is not None:
            return filter_suggestions(source(sender), args)

        if self._default is not None:
            return filter_suggestions(self._default(sender), args)
        return []
