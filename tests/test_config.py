import pytest
from pydantic import ValidationError

from cmdrouter.commands import messages
from cmdrouter.config import Settings


def test_defaults():
    settings = Settings(log_file="")
    assert settings.worker_pool_size == 4
    assert settings.completion_cache_ttl == 0.0
    assert settings.completion_cache_size == 1024
    assert settings.command_modules == []
    assert settings.permission_message == messages.PERMISSION_DENIED


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CMDROUTER_WORKER_POOL_SIZE", "8")
    monkeypatch.setenv("CMDROUTER_COMMAND_MODULES", "plugins.shop, plugins.guild")
    monkeypatch.setenv("CMDROUTER_LOG_JSON", "false")
    settings = Settings()
    assert settings.worker_pool_size == 8
    assert settings.command_modules == ["plugins.shop", "plugins.guild"]
    assert settings.log_json is False


def test_pool_size_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(worker_pool_size=0)
