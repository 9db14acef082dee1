from __future__ import annotations

from dataclasses import dataclass

PERMISSION_DENIED = "You do not have permission to use this command."
WRONG_SENDER = "Only players can use this command."
HANDLER_ERROR = "An error occurred while executing this command."
NO_COMMANDS = "No commands available."
LISTING_HEADER = "Available commands:"


@dataclass(frozen=True)
class EngineMessages:
    """Sender-visible texts for the terminal outcomes of a dispatch."""

    permission_denied: str = PERMISSION_DENIED
    wrong_sender: str = WRONG_SENDER
    handler_error: str = HANDLER_ERROR
    no_commands: str = NO_COMMANDS
    listing_header: str = LISTING_HEADER
