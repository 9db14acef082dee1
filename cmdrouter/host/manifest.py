from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator

from cmdrouter.commands.engine import RootCompleter, RootExecutor
from cmdrouter.commands.sender import Sender

logger = logging.getLogger(__name__)


class RootDeclaration(BaseModel):
    description: str = ""
    usage: str = ""
    aliases: list[str] = Field(default_factory=list)

    @field_validator("aliases")
    @classmethod
    def lower_aliases(cls, v: list[str]) -> list[str]:
        return [a.strip().lower() for a in v if a.strip()]


class HostManifest(BaseModel):
    commands: dict[str, RootDeclaration] = Field(default_factory=dict)

    @field_validator("commands", mode="before")
    @classmethod
    def normalize_roots(cls, v: object) -> object:
        if isinstance(v, dict):
            return {str(k).strip().lower(): (d if d is not None else {}) for k, d in v.items()}
        return v


def load_manifest(path: Path) -> HostManifest:
    """Read the root declarations. A missing or broken file declares nothing."""
    if not path.exists():
        logger.warning("Command manifest not found at %s. No roots are declared.", path)
        return HostManifest()
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        manifest = HostManifest.model_validate(data)
    except Exception:
        logger.error("Failed to load command manifest %s. No roots are declared.", path, exc_info=True)
        return HostManifest()
    logger.info("Loaded %d root declaration(s) from %s", len(manifest.commands), path)
    return manifest


@dataclass(frozen=True)
class _RootBinding:
    executor: RootExecutor
    completer: RootCompleter


class ManifestHost:
    """Host that only exposes roots it declared up front, like a plugin manifest."""

    def __init__(self, manifest: HostManifest | None = None) -> None:
        self._manifest = manifest or HostManifest()
        self._aliases: dict[str, str] = {}
        for root, declaration in self._manifest.commands.items():
            for alias in declaration.aliases:
                self._aliases[alias] = root
        self._bound: dict[str, _RootBinding] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str | Path) -> ManifestHost:
        return cls(load_manifest(Path(path)))

    def declared_roots(self) -> set[str]:
        return set(self._manifest.commands)

    def declaration(self, root: str) -> RootDeclaration | None:
        return self._manifest.commands.get(root.lower())

    def canonical_root(self, label: str) -> str:
        label = label.lower()
        return self._aliases.get(label, label)

    def bind_root(self, root: str, executor: RootExecutor, completer: RootCompleter) -> bool:
        root = root.lower()
        if root not in self._manifest.commands:
            return False
        with self._lock:
            if root in self._bound:
                return True
            self._bound = {**self._bound, root: _RootBinding(executor, completer)}
        logger.info("Bound root command /%s", root)
        return True

    def is_bound(self, root: str) -> bool:
        return self.canonical_root(root) in self._bound

    def bound_roots(self) -> list[str]:
        return sorted(self._bound)

    def dispatch(self, sender: Sender, label: str, args: list[str]) -> bool:
        """Route a tokenized invocation. False when no executor owns the label."""
        root = self.canonical_root(label)
        binding = self._bound.get(root)
        if binding is None:
            return False
        return binding.executor(sender, root, list(args))

    def complete(self, sender: Sender, label: str, args: list[str]) -> list[str]:
        root = self.canonical_root(label)
        binding = self._bound.get(root)
        if binding is None:
            return []
        return binding.completer(sender, root, list(args))
