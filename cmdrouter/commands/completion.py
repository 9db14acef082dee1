from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence

from cmdrouter.commands.guard import has_permission
from cmdrouter.commands.registry import CommandRegistry
from cmdrouter.commands.sender import Sender

logger = logging.getLogger(__name__)

Completer = Callable[[Sender, list[str]], list[str]]


class CompletionProvider:
    """Answers tab-completion queries from the registry.

    A root with a custom completer delegates to it entirely. Otherwise only
    the first argument is completed, from the sub-command heads registered
    under the root.
    """

    def __init__(
        self, registry: CommandRegistry, cache_ttl: float = 0.0, cache_max_entries: int = 1024
    ) -> None:
        self._registry = registry
        self._completers: dict[str, Completer] = {}
        self._cache_ttl = cache_ttl
        self._cache: dict[tuple[str, str, tuple[str, ...]], tuple[float, int, list[str]]] = {}
        self._cache_max_entries = max(1, cache_max_entries)
        self._cache_version = registry.version
        self._cache_lock = threading.Lock()

    def set_completer(self, root: str, completer: Completer) -> None:
        self._completers = {**self._completers, root.lower(): completer}
        self.clear_cache()

    def remove_completer(self, root: str) -> bool:
        root = root.lower()
        if root not in self._completers:
            return False
        self._completers = {k: v for k, v in self._completers.items() if k != root}
        self.clear_cache()
        return True

    def has_completer(self, root: str) -> bool:
        return root.lower() in self._completers

    def complete(self, sender: Sender, root_label: str, args: Sequence[str]) -> list[str]:
        root = root_label.lower()
        args = list(args)

        completer = self._completers.get(root)
        if completer is not None:
            return list(completer(sender, args))

        if len(args) > 1:
            return []

        key = (getattr(sender, "name", ""), root, tuple(args))
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        suggestions = self._default_completions(sender, root, args[0] if args else "")
        self._cache_put(key, suggestions)
        return suggestions

    def _default_completions(self, sender: Sender, root: str, partial: str) -> list[str]:
        partial = partial.lower()
        heads: set[str] = set()
        for entry in self._registry.entries_for_root(root):
            tokens = entry.descriptor.tokens
            if len(tokens) < 2:
                continue
            head = tokens[1]
            if head in heads or not head.startswith(partial):
                continue
            if has_permission(sender, entry.descriptor):
                heads.add(head)
        return sorted(heads)

    def _cache_get(self, key: tuple[str, str, tuple[str, ...]]) -> list[str] | None:
        if self._cache_ttl <= 0:
            return None
        now = time.monotonic()
        with self._cache_lock:
            hit = self._cache.get(key)
            if hit is None:
                return None
            expires_at, version, value = hit
            if expires_at <= now or version != self._registry.version:
                del self._cache[key]
                return None
            return list(value)

    def _cache_put(self, key: tuple[str, str, tuple[str, ...]], value: list[str]) -> None:
        if self._cache_ttl <= 0:
            return
        now = time.monotonic()
        version = self._registry.version
        with self._cache_lock:
            if self._cache_version != version:
                self._cache.clear()
                self._cache_version = version
            # Insertion order is expiry order: re-inserted keys move to the end
            self._cache.pop(key, None)
            while self._cache:
                oldest = next(iter(self._cache))
                if self._cache[oldest][0] > now and len(self._cache) < self._cache_max_entries:
                    break
                del self._cache[oldest]
            self._cache[key] = (now + self._cache_ttl, version, list(value))

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def cache_size(self) -> int:
        return len(self._cache)
