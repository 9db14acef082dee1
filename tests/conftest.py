import pytest
from fastapi.testclient import TestClient

from cmdrouter.commands.engine import CommandEngine
from cmdrouter.commands.sender import SenderKind
from cmdrouter.config import Settings
from cmdrouter.host.manifest import HostManifest, ManifestHost, RootDeclaration
from cmdrouter.host.senders import SenderDirectory, SenderDirectoryConfig, SenderProfile
from cmdrouter.main import app

TEST_SETTINGS = Settings(
    worker_pool_size=2,
    manifest_path="/nonexistent/commands.yaml",
    senders_path="/nonexistent/senders.yaml",
    log_json=False,
    log_file="",
)


class RecordingSender:
    """In-memory sender for tests."""

    def __init__(
        self,
        name: str = "alice",
        kind: SenderKind = SenderKind.GENERIC,
        permissions: set[str] | None = None,
    ) -> None:
        self.name = name
        self.kind = kind
        self.permissions = set(permissions or ())
        self.messages: list[str] = []

    def send(self, text: str) -> None:
        self.messages.append(text)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def player() -> RecordingSender:
    return RecordingSender(name="steve", kind=SenderKind.INTERACTIVE)


@pytest.fixture
def engine():
    engine = CommandEngine(max_workers=2)
    yield engine
    engine.shutdown(wait=True)


@pytest.fixture
def manifest_host() -> ManifestHost:
    return ManifestHost(
        HostManifest(
            commands={
                "shop": RootDeclaration(description="Trading", aliases=["store"]),
                "guild": RootDeclaration(),
            }
        )
    )


@pytest.fixture
def hosted_engine(manifest_host):
    engine = CommandEngine(host=manifest_host, max_workers=2)
    yield engine
    engine.shutdown(wait=True)


# --- Sync fixture for TestClient-based integration tests ---


@pytest.fixture
def client(settings: Settings, manifest_host: ManifestHost) -> TestClient:
    engine = CommandEngine.from_settings(settings, host=manifest_host)

    def buy(sender, args):
        sender.send(f"Bought {' '.join(args)}")

    def broken(sender, args):
        raise RuntimeError("boom")

    engine.register_callback("shop buy", buy, description="Buy an item")
    engine.register_callback("shop sell", buy, permission="shop.sell", description="Sell an item")
    engine.register_callback("shop broken", broken)
    engine.register_callback("unlisted", buy)

    app.state.settings = settings
    app.state.host = manifest_host
    app.state.engine = engine
    app.state.sender_directory = SenderDirectory(
        SenderDirectoryConfig(
            senders={
                "admin": SenderProfile(kind=SenderKind.INTERACTIVE, permissions=["shop.*"]),
            }
        )
    )

    yield TestClient(app, raise_server_exceptions=False)

    engine.shutdown(wait=True)
