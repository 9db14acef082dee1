from fastapi import Request

from cmdrouter.commands.engine import CommandEngine
from cmdrouter.config import Settings
from cmdrouter.host.manifest import ManifestHost
from cmdrouter.host.senders import SenderDirectory


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_engine(request: Request) -> CommandEngine:
    return request.app.state.engine


def get_host(request: Request) -> ManifestHost:
    return request.app.state.host


def get_sender_directory(request: Request) -> SenderDirectory:
    return request.app.state.sender_directory
