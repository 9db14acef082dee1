from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from cmdrouter.commands.completion import Completer, CompletionProvider
from cmdrouter.commands.dispatcher import Dispatcher, DispatchOutcome
from cmdrouter.commands.guard import PermissionGuard, has_permission
from cmdrouter.commands.messages import EngineMessages
from cmdrouter.commands.models import (
    CallbackBinding,
    CommandDescriptor,
    CommandEntry,
    HandlerBinding,
    NoMatch,
    SenderRequirement,
)
from cmdrouter.commands.registry import CommandRegistry
from cmdrouter.commands.resolver import CommandResolver
from cmdrouter.commands.sender import Sender, safe_send

if TYPE_CHECKING:
    from cmdrouter.config import Settings

logger = logging.getLogger(__name__)

RootExecutor = Callable[[Sender, str, list[str]], bool]
RootCompleter = Callable[[Sender, str, list[str]], list[str]]


class RootHost(Protocol):
    """The host side of root claiming.

    ``bind_root`` returns False when the host never declared ``root``.
    """

    def bind_root(self, root: str, executor: RootExecutor, completer: RootCompleter) -> bool: ...


class CommandEngine:
    def __init__(
        self,
        host: RootHost | None = None,
        max_workers: int = 4,
        completion_cache_ttl: float = 0.0,
        completion_cache_size: int = 1024,
        messages: EngineMessages | None = None,
    ) -> None:
        self._host = host
        self._messages = messages or EngineMessages()
        self.registry = CommandRegistry(root_claimer=self._claim_root)
        self.resolver = CommandResolver(self.registry)
        self.guard = PermissionGuard()
        self.dispatcher = Dispatcher(
            max_workers=max_workers, guard=self.guard, messages=self._messages
        )
        self.completion = CompletionProvider(
            self.registry, cache_ttl=completion_cache_ttl, cache_max_entries=completion_cache_size
        )

    @classmethod
    def from_settings(cls, settings: Settings, host: RootHost | None = None) -> CommandEngine:
        messages = EngineMessages(
            permission_denied=settings.permission_message,
            wrong_sender=settings.wrong_sender_message,
            handler_error=settings.error_message,
            no_commands=settings.no_commands_message,
        )
        return cls(
            host=host,
            max_workers=settings.worker_pool_size,
            completion_cache_ttl=settings.completion_cache_ttl,
            completion_cache_size=settings.completion_cache_size,
            messages=messages,
        )

    @property
    def messages(self) -> EngineMessages:
        return self._messages

    # --- Registration ---

    def register(
        self, descriptor: CommandDescriptor, binding: HandlerBinding, owner: Any = None
    ) -> CommandEntry:
        return self.registry.register(descriptor, binding, owner=owner)

    def register_callback(
        self,
        path: str,
        callback: Callable[[Any, list[str]], Any],
        *,
        permission: str = "",
        description: str = "",
        usage: str = "",
        is_async: bool = False,
        requirement: SenderRequirement = SenderRequirement.ANY,
        owner: Any = None,
    ) -> CommandEntry:
        descriptor = CommandDescriptor(
            path=path,
            permission=permission,
            description=description,
            usage=usage,
            is_async=is_async,
        )
        return self.register(descriptor, CallbackBinding(callback, requirement), owner=owner)

    def unregister(self, path: str) -> bool:
        return self.registry.unregister(path)

    def unregister_owner(self, owner: Any) -> int:
        return self.registry.unregister_owner(owner)

    def set_completer(self, root: str, completer: Completer) -> None:
        self.completion.set_completer(root, completer)

    def _claim_root(self, root: str) -> bool:
        if self._host is None:
            return True
        return self._host.bind_root(root, self.execute, self.complete)

    # --- Invocation ---

    def execute(self, sender: Sender, label: str, args: Sequence[str]) -> bool:
        """Entry point the host calls for every invocation under a claimed root."""
        result = self.resolver.resolve(label, args)
        if isinstance(result, NoMatch):
            self.send_listing(sender, result.root)
            return self.registry.is_root_known(result.root)

        outcome = self.dispatcher.invoke(result, sender)
        logger.debug("Dispatched %s for %s: %s", result.entry.path, sender.name, outcome.value)
        return True

    def dispatch(self, sender: Sender, label: str, args: Sequence[str]) -> DispatchOutcome | None:
        """Like ``execute`` but report the outcome; None when nothing matched."""
        result = self.resolver.resolve(label, args)
        if isinstance(result, NoMatch):
            self.send_listing(sender, result.root)
            return None
        return self.dispatcher.invoke(result, sender)

    def help_lines(self, sender: Sender, root: str) -> list[str]:
        entries = sorted(self.registry.entries_for_root(root), key=lambda e: e.path)
        lines = []
        for entry in entries:
            if not has_permission(sender, entry.descriptor):
                continue
            line = f"/{entry.path}"
            if entry.descriptor.description:
                line += f" - {entry.descriptor.description}"
            lines.append(line)
        return lines

    def send_listing(self, sender: Sender, root: str) -> None:
        lines = self.help_lines(sender, root)
        if not lines:
            safe_send(sender, self._messages.no_commands)
            return
        safe_send(sender, "\n".join([self._messages.listing_header, *lines]))

    def complete(self, sender: Sender, label: str, args: Sequence[str]) -> list[str]:
        try:
            return self.completion.complete(sender, label, args)
        except Exception:
            logger.exception("Completion for '%s' failed", label)
            return []

    # --- Lifecycle ---

    def wait_for_in_flight(self, timeout: float = 30.0) -> bool:
        return self.dispatcher.wait_for_in_flight(timeout=timeout)

    def shutdown(self, wait: bool = False) -> None:
        self.dispatcher.shutdown(wait=wait)
