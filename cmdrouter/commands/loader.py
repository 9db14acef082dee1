from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdrouter.commands.engine import CommandEngine

logger = logging.getLogger(__name__)


def load_command_modules(engine: CommandEngine, module_names: list[str]) -> list[str]:
    """Import each module and call its ``register(engine)`` function.

    A module that fails to import or register is logged and skipped; the
    commands it registered before failing stay registered.
    Returns the names of the modules that loaded cleanly.
    """
    loaded = []
    for name in module_names:
        try:
            module = importlib.import_module(name)
        except ImportError:
            logger.error("Could not import command module %s", name, exc_info=True)
            continue

        register = getattr(module, "register", None)
        if not callable(register):
            logger.warning("Command module %s has no register(engine) function", name)
            continue

        try:
            register(engine)
        except Exception:
            logger.exception("Command module %s failed to register", name)
            continue

        loaded.append(name)
        logger.info("Loaded command module: %s", name)
    return loaded
