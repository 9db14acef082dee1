from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cmdrouter.commands import messages


class Settings(BaseSettings):
    # Engine
    worker_pool_size: int = 4
    completion_cache_ttl: float = 0.0  # seconds, 0 disables the cache
    completion_cache_size: int = 1024
    shutdown_timeout: float = 30.0

    # Host wiring
    manifest_path: str = "data/commands.yaml"
    senders_path: str = "data/senders.yaml"
    command_modules: Annotated[list[str], NoDecode] = []

    @field_validator("command_modules", mode="before")
    @classmethod
    def parse_modules(cls, v: object) -> object:
        if isinstance(v, str):
            return [m.strip() for m in v.split(",") if m.strip()]
        return v

    @field_validator("worker_pool_size")
    @classmethod
    def positive_pool(cls, v: int) -> int:
        if v < 1:
            raise ValueError("worker_pool_size must be at least 1")
        return v

    # Sender-visible messages
    permission_message: str = messages.PERMISSION_DENIED
    wrong_sender_message: str = messages.WRONG_SENDER
    error_message: str = messages.HANDLER_ERROR
    no_commands_message: str = messages.NO_COMMANDS

    # Logging
    log_level: str = "INFO"
    log_json: bool = True
    log_file: str = "data/cmdrouter.log"

    model_config = SettingsConfigDict(env_prefix="CMDROUTER_", env_file=".env")
