import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cmdrouter.commands.engine import CommandEngine
from cmdrouter.commands.loader import load_command_modules
from cmdrouter.config import Settings
from cmdrouter.health.router import router as health_router
from cmdrouter.host.manifest import ManifestHost
from cmdrouter.host.router import router as commands_router
from cmdrouter.host.senders import SenderDirectory
from cmdrouter.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    configure_logging(
        level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file
    )

    # Host and engine
    host = ManifestHost.from_file(settings.manifest_path)
    engine = CommandEngine.from_settings(settings, host=host)
    load_command_modules(engine, settings.command_modules)
    logger.info(
        "Command engine ready: %d command(s) under %d root(s)",
        len(engine.registry),
        len(engine.registry.roots()),
    )

    app.state.settings = settings
    app.state.host = host
    app.state.engine = engine
    app.state.sender_directory = SenderDirectory.from_file(settings.senders_path)

    yield

    engine.shutdown()
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, engine.wait_for_in_flight, settings.shutdown_timeout)


app = FastAPI(title="cmdrouter", lifespan=lifespan)
app.include_router(health_router)
app.include_router(commands_router)
