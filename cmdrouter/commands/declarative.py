"""Compact ways to declare many commands at once.

Three styles feed the same ``CommandEngine.register``:

- decorators on methods, collected by ``register_instance``;
- ``CommandSpec`` rows passed to ``register_table``;
- the fluent ``CommandBuilder`` for a single callback.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cmdrouter.commands.exceptions import InvalidPath
from cmdrouter.commands.models import (
    CallbackBinding,
    CommandDescriptor,
    CommandEntry,
    MethodBinding,
    SenderRequirement,
)

if TYPE_CHECKING:
    from cmdrouter.commands.engine import CommandEngine

logger = logging.getLogger(__name__)

_COMMAND_ATTR = "__cmdrouter_command__"
_ASYNC_ATTR = "__cmdrouter_async__"
_COMPLETER_ATTR = "__cmdrouter_completer__"


@dataclass(frozen=True)
class CommandMarker:
    name: str
    parent: str = ""
    permission: str = ""
    description: str = ""
    usage: str = ""
    is_async: bool = False
    sender: SenderRequirement = SenderRequirement.ANY

    @property
    def path(self) -> str:
        return f"{self.parent} {self.name}" if self.parent else self.name


def command(
    name: str,
    *,
    permission: str = "",
    description: str = "",
    usage: str = "",
    is_async: bool = False,
    sender: SenderRequirement | str = SenderRequirement.ANY,
) -> Callable[[Callable], Callable]:
    marker = CommandMarker(
        name=name,
        permission=permission,
        description=description,
        usage=usage,
        is_async=is_async,
        sender=SenderRequirement(sender),
    )

    def decorator(fn: Callable) -> Callable:
        setattr(fn, _COMMAND_ATTR, marker)
        return fn

    return decorator


def subcommand(
    parent: str,
    name: str,
    *,
    permission: str = "",
    description: str = "",
    usage: str = "",
    is_async: bool = False,
    sender: SenderRequirement | str = SenderRequirement.ANY,
) -> Callable[[Callable], Callable]:
    marker = CommandMarker(
        name=name,
        parent=parent,
        permission=permission,
        description=description,
        usage=usage,
        is_async=is_async,
        sender=SenderRequirement(sender),
    )

    def decorator(fn: Callable) -> Callable:
        setattr(fn, _COMMAND_ATTR, marker)
        return fn

    return decorator


def async_command(fn: Callable) -> Callable:
    """Run the decorated command on the worker pool, whatever its marker says."""
    setattr(fn, _ASYNC_ATTR, True)
    return fn


def tab_complete(root: str) -> Callable[[Callable], Callable]:
    def decorator(fn: Callable) -> Callable:
        setattr(fn, _COMPLETER_ATTR, root)
        return fn

    return decorator


def _marked_functions(obj: Any) -> list[tuple[str, CommandMarker, bool]]:
    found = []
    for attr, fn in inspect.getmembers(type(obj), inspect.isfunction):
        marker = getattr(fn, _COMMAND_ATTR, None)
        if marker is None:
            continue
        found.append((attr, marker, bool(getattr(fn, _ASYNC_ATTR, False))))
    # Roots before sub-commands so the host sees root claims first
    found.sort(key=lambda item: (bool(item[1].parent), item[1].path))
    return found


def register_instance(engine: CommandEngine, obj: Any) -> list[CommandEntry]:
    """Register every decorated method of ``obj``, owned by ``obj``.

    Any registration error propagates; commands registered before the
    failing one stay registered.
    """
    entries = []
    for attr, marker, force_async in _marked_functions(obj):
        descriptor = CommandDescriptor(
            path=marker.path,
            permission=marker.permission,
            description=marker.description,
            usage=marker.usage,
            is_async=marker.is_async or force_async,
        )
        binding = MethodBinding(target=obj, method_name=attr, requirement=marker.sender)
        entries.append(engine.register(descriptor, binding, owner=obj))

    for attr, fn in inspect.getmembers(type(obj), inspect.isfunction):
        root = getattr(fn, _COMPLETER_ATTR, None)
        if root is not None:
            engine.set_completer(root, getattr(obj, attr))
            logger.info("Registered completer for /%s from %s", root, type(obj).__name__)

    logger.info("Registered %d command(s) from %s", len(entries), type(obj).__name__)
    return entries


@dataclass(frozen=True)
class CommandSpec:
    path: str
    handler: Callable[[Any, list[str]], Any]
    permission: str = ""
    description: str = ""
    usage: str = ""
    is_async: bool = False
    sender: SenderRequirement = SenderRequirement.ANY


def register_table(
    engine: CommandEngine, specs: Iterable[CommandSpec], owner: Any = None
) -> list[CommandEntry]:
    return [
        engine.register_callback(
            spec.path,
            spec.handler,
            permission=spec.permission,
            description=spec.description,
            usage=spec.usage,
            is_async=spec.is_async,
            requirement=spec.sender,
            owner=owner,
        )
        for spec in specs
    ]


class CommandBuilder:
    def __init__(self, name: str = "") -> None:
        self._path = name
        self._permission = ""
        self._description = ""
        self._usage = ""
        self._is_async = False
        self._sender = SenderRequirement.ANY
        self._executor: Callable[[Any, list[str]], Any] | None = None

    def name(self, path: str) -> CommandBuilder:
        self._path = path
        return self

    def permission(self, permission: str) -> CommandBuilder:
        self._permission = permission
        return self

    def description(self, description: str) -> CommandBuilder:
        self._description = description
        return self

    def usage(self, usage: str) -> CommandBuilder:
        self._usage = usage
        return self

    def run_async(self, enabled: bool = True) -> CommandBuilder:
        self._is_async = enabled
        return self

    def interactive_only(self) -> CommandBuilder:
        self._sender = SenderRequirement.INTERACTIVE
        return self

    def with_context(self) -> CommandBuilder:
        self._sender = SenderRequirement.CONTEXT
        return self

    def executor(self, fn: Callable[[Any, list[str]], Any]) -> CommandBuilder:
        self._executor = fn
        return self

    def build(self) -> tuple[CommandDescriptor, CallbackBinding]:
        if self._executor is None:
            raise ValueError(f"Command '{self._path}' has no executor")
        if not self._path.strip():
            raise InvalidPath(self._path)
        descriptor = CommandDescriptor(
            path=self._path,
            permission=self._permission,
            description=self._description,
            usage=self._usage,
            is_async=self._is_async,
        )
        return descriptor, CallbackBinding(self._executor, self._sender)

    def register(self, engine: CommandEngine, owner: Any = None) -> CommandEntry:
        descriptor, binding = self.build()
        return engine.register(descriptor, binding, owner=owner)
