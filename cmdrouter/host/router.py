from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from cmdrouter.commands.engine import CommandEngine
from cmdrouter.commands.guard import has_permission
from cmdrouter.dependencies import get_engine, get_host, get_sender_directory
from cmdrouter.host.manifest import ManifestHost
from cmdrouter.host.parser import parse_command_line
from cmdrouter.host.senders import SenderDirectory
from cmdrouter.models import (
    CommandInfo,
    CommandListResponse,
    CompleteRequest,
    CompleteResponse,
    ExecuteRequest,
    ExecuteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commands")


# Plain ``def`` endpoints: synchronous handlers run inline and may block,
# so FastAPI runs these on its threadpool.
@router.post("/execute", response_model=ExecuteResponse)
def execute(
    body: ExecuteRequest,
    host: ManifestHost = Depends(get_host),
    directory: SenderDirectory = Depends(get_sender_directory),
) -> ExecuteResponse:
    parsed = parse_command_line(body.line)
    if parsed is None:
        return ExecuteResponse(handled=False)

    label, args = parsed
    sender = directory.sender_for(body.sender)
    handled = host.dispatch(sender, label, args)
    if not handled:
        logger.info("Unhandled command /%s from %s", label, body.sender)
    # Replies from async commands arrive after this returns and are dropped
    return ExecuteResponse(handled=handled, replies=sender.drain())


@router.post("/complete", response_model=CompleteResponse)
def complete(
    body: CompleteRequest,
    host: ManifestHost = Depends(get_host),
    directory: SenderDirectory = Depends(get_sender_directory),
) -> CompleteResponse:
    parsed = parse_command_line(body.line, for_completion=True)
    if parsed is None:
        return CompleteResponse()
    label, args = parsed
    sender = directory.sender_for(body.sender)
    return CompleteResponse(suggestions=host.complete(sender, label, args))


@router.get("", response_model=CommandListResponse)
def list_commands(
    sender: str = Query(...),
    engine: CommandEngine = Depends(get_engine),
    directory: SenderDirectory = Depends(get_sender_directory),
) -> CommandListResponse:
    actor = directory.sender_for(sender)
    entries = sorted(engine.registry.list_entries(), key=lambda e: e.path)
    return CommandListResponse(
        commands=[
            CommandInfo(
                path=e.path,
                description=e.descriptor.description,
                usage=e.descriptor.usage,
                is_async=e.descriptor.is_async,
            )
            for e in entries
            if has_permission(actor, e.descriptor)
        ]
    )
