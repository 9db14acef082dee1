from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any

from cmdrouter.commands.context import CommandContext
from cmdrouter.commands.exceptions import DuplicatePath, InvalidPath, InvalidSignature
from cmdrouter.commands.models import (
    CommandDescriptor,
    CommandEntry,
    HandlerBinding,
    MethodBinding,
    SenderRequirement,
    normalize_path,
)

logger = logging.getLogger(__name__)

RootClaimer = Callable[[str], bool]

_ARGS_ANNOTATIONS = {
    "list",
    "list[str]",
    "List[str]",
    "Sequence[str]",
    "tuple[str,...]",
    "Tuple[str,...]",
}
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _annotation_text(annotation: Any) -> str:
    text = annotation if isinstance(annotation, str) else getattr(annotation, "__name__", None)
    if not isinstance(annotation, str) and getattr(annotation, "__args__", None):
        text = repr(annotation)
    text = str(text or annotation).replace(" ", "")
    for prefix in ("typing.", "collections.abc."):
        text = text.replace(prefix, "")
    return text


def _takes_context(annotation: Any) -> bool:
    if isinstance(annotation, type):
        try:
            return issubclass(annotation, CommandContext)
        except TypeError:
            return False
    return _annotation_text(annotation).strip("\"'").rsplit(".", 1)[-1] == "CommandContext"


def _check_sender_param(binding: MethodBinding, param: inspect.Parameter) -> None:
    """The first parameter's annotation, when present, must agree with the requirement."""
    if param.annotation is inspect.Parameter.empty:
        return
    takes_context = _takes_context(param.annotation)
    if takes_context and binding.requirement is not SenderRequirement.CONTEXT:
        raise InvalidSignature(
            binding.name,
            f"first parameter takes a CommandContext but the sender requirement is "
            f"'{binding.requirement}'",
        )
    if not takes_context and binding.requirement is SenderRequirement.CONTEXT:
        raise InvalidSignature(
            binding.name,
            f"first parameter must be a CommandContext, not {_annotation_text(param.annotation)}",
        )


def validate_method_binding(binding: MethodBinding) -> None:
    """Check that a bound method can be called as ``(sender, args)``."""
    if not isinstance(binding.requirement, SenderRequirement):
        raise InvalidSignature(binding.name, f"unknown sender requirement {binding.requirement!r}")

    method = getattr(binding.target, binding.method_name, None)
    if method is None or not callable(method):
        raise InvalidSignature(binding.name, "method not found on target")

    try:
        params = list(inspect.signature(method).parameters.values())
    except (TypeError, ValueError) as e:
        raise InvalidSignature(binding.name, f"signature unavailable ({e})") from e

    if len(params) != 2:
        raise InvalidSignature(binding.name, f"expected 2 parameters, got {len(params)}")
    if any(p.kind not in _POSITIONAL for p in params):
        raise InvalidSignature(binding.name, "parameters must be positional")

    _check_sender_param(binding, params[0])

    args_param = params[1]
    if args_param.annotation is not inspect.Parameter.empty:
        text = _annotation_text(args_param.annotation)
        if text not in _ARGS_ANNOTATIONS:
            raise InvalidSignature(
                binding.name, f"second parameter must be a list of strings, not {text}"
            )


class CommandRegistry:
    """Flat, space-joined path namespace of registered commands.

    Writes are serialized on a lock and publish a fresh mapping, so lookups
    never take the lock.
    """

    def __init__(self, root_claimer: RootClaimer | None = None) -> None:
        self._entries: dict[str, CommandEntry] = {}
        self._roots: frozenset[str] = frozenset()
        self._owners: dict[int, set[str]] = {}
        self._lock = threading.Lock()
        self._root_claimer = root_claimer
        self._version = 0

    @property
    def version(self) -> int:
        """Incremented on every registration change."""
        return self._version

    def set_root_claimer(self, root_claimer: RootClaimer | None) -> None:
        self._root_claimer = root_claimer

    def register(
        self,
        descriptor: CommandDescriptor,
        binding: HandlerBinding,
        owner: Any = None,
    ) -> CommandEntry:
        path = descriptor.path
        if not path:
            raise InvalidPath(path)
        if isinstance(binding, MethodBinding):
            validate_method_binding(binding)

        entry = CommandEntry(descriptor=descriptor, binding=binding, owner=owner)
        root = descriptor.root

        with self._lock:
            if path in self._entries:
                raise DuplicatePath(path)
            entries = dict(self._entries)
            entries[path] = entry
            self._entries = entries
            if owner is not None:
                self._owners.setdefault(id(owner), set()).add(path)
            new_root = root not in self._roots
            if new_root:
                self._roots = self._roots | {root}
            self._version += 1

        logger.info(
            "Registered command: %s (async=%s, permission=%s)",
            path,
            descriptor.is_async,
            descriptor.permission or "-",
        )
        if new_root:
            self._claim_root(root)
        return entry

    def _claim_root(self, root: str) -> None:
        if self._root_claimer is None:
            return
        if not self._root_claimer(root):
            logger.warning(
                "Root command '%s' is not declared by the host; its commands are registered "
                "but unreachable",
                root,
            )

    def unregister(self, path: str) -> bool:
        key = normalize_path(path)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entries = dict(self._entries)
            del entries[key]
            self._entries = entries
            if entry.owner is not None:
                owned = self._owners.get(id(entry.owner))
                if owned is not None:
                    owned.discard(key)
                    if not owned:
                        del self._owners[id(entry.owner)]
            self._version += 1
        logger.info("Unregistered command: %s", key)
        return True

    def unregister_owner(self, owner: Any) -> int:
        """Remove every command registered on behalf of ``owner``."""
        with self._lock:
            paths = self._owners.pop(id(owner), set())
            if not paths:
                return 0
            entries = {k: v for k, v in self._entries.items() if k not in paths}
            removed = len(self._entries) - len(entries)
            self._entries = entries
            self._version += 1
        logger.info("Unregistered %d command(s) for %s", removed, type(owner).__name__)
        return removed

    def lookup_exact(self, path: str) -> CommandEntry | None:
        return self._entries.get(path)

    def get(self, path: str) -> CommandEntry | None:
        return self._entries.get(normalize_path(path))

    def entries_for_root(self, root: str) -> list[CommandEntry]:
        root = root.lower()
        return [e for e in self._entries.values() if e.descriptor.root == root]

    def list_entries(self) -> list[CommandEntry]:
        return list(self._entries.values())

    def roots(self) -> frozenset[str]:
        return self._roots

    def is_root_known(self, root: str) -> bool:
        return root.lower() in self._roots

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._entries
