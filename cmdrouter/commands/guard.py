from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel

from cmdrouter.commands.models import CommandDescriptor, CommandEntry, SenderRequirement
from cmdrouter.commands.sender import Sender, is_interactive

logger = logging.getLogger(__name__)


class GuardAction(StrEnum):
    ALLOW = "allow"
    DENY = "deny"
    WRONG_SENDER = "wrong_sender"


class GuardDecision(BaseModel):
    action: GuardAction
    reason: str | None = None

    @property
    def is_allowed(self) -> bool:
        return self.action == GuardAction.ALLOW

    @property
    def is_denied(self) -> bool:
        return self.action == GuardAction.DENY

    @property
    def is_wrong_sender(self) -> bool:
        return self.action == GuardAction.WRONG_SENDER


def has_permission(sender: Sender, descriptor: CommandDescriptor) -> bool:
    return not descriptor.permission or sender.has_permission(descriptor.permission)


class PermissionGuard:
    """Decides whether a sender may run a resolved command.

    Permission is evaluated first, then the handler's sender requirement.
    Both refusals are ordinary outcomes and are only logged at debug level.
    """

    def check(self, sender: Sender, entry: CommandEntry) -> GuardDecision:
        descriptor = entry.descriptor
        if not has_permission(sender, descriptor):
            logger.debug("Sender %s lacks %s for %s", sender.name, descriptor.permission, entry.path)
            return GuardDecision(
                action=GuardAction.DENY, reason=f"missing permission {descriptor.permission}"
            )

        if entry.requirement == SenderRequirement.INTERACTIVE and not is_interactive(sender):
            logger.debug("Sender %s is not interactive, rejecting %s", sender.name, entry.path)
            return GuardDecision(
                action=GuardAction.WRONG_SENDER, reason="interactive sender required"
            )

        return GuardDecision(action=GuardAction.ALLOW)
