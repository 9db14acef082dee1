from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, field_validator

from cmdrouter.commands.context import CommandContext
from cmdrouter.commands.sender import Sender


def normalize_path(path: str) -> str:
    """Lower-case a command path and collapse its whitespace to single spaces."""
    return " ".join(path.lower().split())


class SenderRequirement(StrEnum):
    """What the first parameter of a handler expects to receive."""

    ANY = "any"
    INTERACTIVE = "interactive"
    CONTEXT = "context"


class CommandDescriptor(BaseModel):
    path: str
    permission: str = ""
    description: str = ""
    usage: str = ""
    is_async: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("path", mode="before")
    @classmethod
    def normalize(cls, v: object) -> object:
        if isinstance(v, str):
            return normalize_path(v)
        return v

    @field_validator("permission")
    @classmethod
    def strip_permission(cls, v: str) -> str:
        return v.strip()

    @property
    def tokens(self) -> list[str]:
        return self.path.split(" ") if self.path else []

    @property
    def root(self) -> str:
        tokens = self.tokens
        return tokens[0] if tokens else ""

    @property
    def depth(self) -> int:
        return len(self.tokens)


def _first_argument(
    requirement: SenderRequirement, sender: Sender, args: list[str], label: str
) -> Any:
    if requirement == SenderRequirement.CONTEXT:
        return CommandContext(sender=sender, args=list(args), label=label)
    return sender


@dataclass(frozen=True)
class CallbackBinding:
    callback: Callable[[Any, list[str]], Any]
    requirement: SenderRequirement = SenderRequirement.ANY

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

    def invoke(self, sender: Sender, args: list[str], label: str) -> None:
        self.callback(_first_argument(self.requirement, sender, args, label), list(args))


@dataclass(frozen=True)
class MethodBinding:
    target: Any
    method_name: str
    requirement: SenderRequirement = SenderRequirement.ANY

    @property
    def name(self) -> str:
        return f"{type(self.target).__name__}.{self.method_name}"

    @property
    def method(self) -> Callable[..., Any]:
        return getattr(self.target, self.method_name)

    def invoke(self, sender: Sender, args: list[str], label: str) -> None:
        self.method(_first_argument(self.requirement, sender, args, label), list(args))


HandlerBinding = Union[CallbackBinding, MethodBinding]


@dataclass(frozen=True)
class CommandEntry:
    descriptor: CommandDescriptor
    binding: HandlerBinding
    owner: Any = field(default=None, compare=False)

    @property
    def path(self) -> str:
        return self.descriptor.path

    @property
    def requirement(self) -> SenderRequirement:
        return self.binding.requirement


@dataclass(frozen=True)
class Matched:
    entry: CommandEntry
    remaining_args: list[str]
    label: str


@dataclass(frozen=True)
class NoMatch:
    root: str
    args: list[str]


ResolutionResult = Union[Matched, NoMatch]
