from __future__ import annotations

from dataclasses import dataclass, field

from cmdrouter.commands.sender import Sender, is_interactive

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


@dataclass
class CommandContext:
    """Wraps a sender and its remaining arguments for context-style handlers."""

    sender: Sender
    args: list[str] = field(default_factory=list)
    label: str = "unknown"

    @property
    def arg_count(self) -> int:
        return len(self.args)

    @property
    def is_interactive(self) -> bool:
        return is_interactive(self.sender)

    def arg(self, index: int, default: str | None = None) -> str | None:
        if 0 <= index < len(self.args):
            return self.args[index]
        return default

    def int_arg(self, index: int) -> int | None:
        value = self.arg(index)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def float_arg(self, index: int) -> float | None:
        value = self.arg(index)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    def bool_arg(self, index: int) -> bool | None:
        value = self.arg(index)
        if value is None:
            return None
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        return None

    def joined(self, start: int = 0) -> str:
        """Join the arguments from ``start`` onwards with single spaces."""
        return " ".join(self.args[start:])

    def has_permission(self, permission: str) -> bool:
        return not permission or self.sender.has_permission(permission)

    def reply(self, text: str) -> None:
        self.sender.send(text)

    def ensure_interactive(self, message: str = "Only players can use this command.") -> bool:
        if not self.is_interactive:
            self.reply(message)
            return False
        return True

    def ensure_args(self, minimum: int, usage: str) -> bool:
        if len(self.args) < minimum:
            self.reply(f"Usage: {usage}")
            return False
        return True
