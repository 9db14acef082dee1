from __future__ import annotations

import logging
from enum import StrEnum
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class SenderKind(StrEnum):
    GENERIC = "generic"
    INTERACTIVE = "interactive"


@runtime_checkable
class Sender(Protocol):
    """Anything that can invoke a command.

    The engine only borrows a sender for the duration of one call and never
    keeps a reference to it afterwards.
    """

    name: str
    kind: SenderKind

    def send(self, text: str) -> None: ...

    def has_permission(self, permission: str) -> bool: ...


def is_interactive(sender: Sender) -> bool:
    return getattr(sender, "kind", SenderKind.GENERIC) == SenderKind.INTERACTIVE


def safe_send(sender: Sender, text: str) -> None:
    """Deliver ``text``; a sender that fails to receive it is logged, not raised."""
    try:
        sender.send(text)
    except Exception:
        logger.exception("Could not deliver message to sender %s", getattr(sender, "name", "?"))
