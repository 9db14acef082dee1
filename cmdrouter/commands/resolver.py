from __future__ import annotations

from collections.abc import Sequence

from cmdrouter.commands.models import Matched, NoMatch, ResolutionResult
from cmdrouter.commands.registry import CommandRegistry


class CommandResolver:
    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry

    def resolve(self, root_label: str, args: Sequence[str]) -> ResolutionResult:
        """Find the longest registered path that prefixes ``[root_label] + args``.

        Only the lookup key is lower-cased; the remaining arguments handed to
        the handler keep the caller's casing.
        Probing stops at the first token that is blank or holds whitespace.
        """
        raw = [root_label, *args]
        tokens = [t.lower() for t in raw]
        depth = next((i for i, t in enumerate(tokens) if len(t.split()) != 1), len(tokens))
        for i in range(depth, 0, -1):
            entry = self._registry.lookup_exact(" ".join(tokens[:i]))
            if entry is not None:
                return Matched(entry=entry, remaining_args=raw[i:], label=root_label)
        return NoMatch(root=root_label.lower(), args=list(args))
