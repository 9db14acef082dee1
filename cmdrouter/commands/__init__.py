"""Command registration and resolution engine.

Provides:
- CommandEngine: registry + resolver + guard + dispatcher + completion
- command / subcommand / async_command / tab_complete: method markers
- CommandBuilder, CommandSpec: callback registration helpers
- CompleterBuilder: fluent per-root tab completers
"""

from cmdrouter.commands.completers import CompleterBuilder
from cmdrouter.commands.context import CommandContext
from cmdrouter.commands.declarative import (
    CommandBuilder,
    CommandSpec,
    async_command,
    command,
    register_instance,
    register_table,
    subcommand,
    tab_complete,
)
from cmdrouter.commands.dispatcher import DispatchOutcome
from cmdrouter.commands.engine import CommandEngine
from cmdrouter.commands.exceptions import (
    DuplicatePath,
    InvalidPath,
    InvalidSignature,
    RegistrationError,
)
from cmdrouter.commands.models import (
    CallbackBinding,
    CommandDescriptor,
    Matched,
    MethodBinding,
    NoMatch,
    SenderRequirement,
)
from cmdrouter.commands.sender import Sender, SenderKind

__all__ = [
    "CallbackBinding",
    "CommandBuilder",
    "CommandContext",
    "CommandDescriptor",
    "CommandEngine",
    "CommandSpec",
    "CompleterBuilder",
    "DispatchOutcome",
    "DuplicatePath",
    "InvalidPath",
    "InvalidSignature",
    "Matched",
    "MethodBinding",
    "NoMatch",
    "RegistrationError",
    "Sender",
    "SenderKind",
    "SenderRequirement",
    "async_command",
    "command",
    "register_instance",
    "register_table",
    "subcommand",
    "tab_complete",
]
