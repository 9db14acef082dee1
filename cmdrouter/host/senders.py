from __future__ import annotations

import logging
import threading
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field

from cmdrouter.commands.sender import SenderKind

logger = logging.getLogger(__name__)


def permission_matches(granted: str, permission: str) -> bool:
    """``*`` grants everything, ``shop.*`` grants ``shop.buy`` and deeper nodes."""
    if granted == "*" or granted == permission:
        return True
    if granted.endswith(".*"):
        return permission.startswith(granted[:-1])
    return False


class SenderProfile(BaseModel):
    kind: SenderKind = SenderKind.GENERIC
    permissions: list[str] = Field(default_factory=list)


class SenderDirectoryConfig(BaseModel):
    default: SenderProfile = Field(default_factory=SenderProfile)
    senders: dict[str, SenderProfile] = Field(default_factory=dict)


class BufferedSender:
    """Sender that keeps replies in memory until the host collects them."""

    def __init__(
        self,
        name: str,
        kind: SenderKind = SenderKind.GENERIC,
        permissions: list[str] | None = None,
    ) -> None:
        self.name = name
        self.kind = kind
        self._permissions = tuple(permissions or ())
        self._replies: list[str] = []
        self._lock = threading.Lock()

    def send(self, text: str) -> None:
        with self._lock:
            self._replies.append(text)

    def has_permission(self, permission: str) -> bool:
        return any(permission_matches(g, permission) for g in self._permissions)

    @property
    def replies(self) -> list[str]:
        with self._lock:
            return list(self._replies)

    def drain(self) -> list[str]:
        with self._lock:
            replies, self._replies = self._replies, []
        return replies


class SenderDirectory:
    def __init__(self, config: SenderDirectoryConfig | None = None) -> None:
        self._config = config or SenderDirectoryConfig()

    @classmethod
    def from_file(cls, path: str | Path) -> SenderDirectory:
        path = Path(path)
        if not path.exists():
            logger.warning("Sender profiles not found at %s. Everyone gets the default profile.", path)
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            config = SenderDirectoryConfig.model_validate(data)
        except Exception:
            logger.error("Failed to load sender profiles from %s", path, exc_info=True)
            return cls()
        logger.info("Loaded %d sender profile(s) from %s", len(config.senders), path)
        return cls(config)

    def profile(self, name: str) -> SenderProfile:
        return self._config.senders.get(name, self._config.default)

    def sender_for(self, name: str) -> BufferedSender:
        profile = self.profile(name)
        return BufferedSender(name=name, kind=profile.kind, permissions=profile.permissions)
