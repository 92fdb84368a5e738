import pytest
from fastapi.testclient import TestClient

from keyserver.application.key_server import KeyServer
from keyserver.domain.services import Digester
from keyserver.infrastructure.memory.challenge_cache import InMemoryChallengeCache
from keyserver.infrastructure.memory.key_store import InMemoryKeyStore
from keyserver.main import create_app
from keyserver.presentation.dependencies import get_key_server, get_notifier
from keyserver.settings import Settings
from tests.fakes import FakeClock, FakeNotifier


@pytest.fixture()
def app_and_deps():
    app = create_app(
        Settings(_env_file=None, open_url="https://app.example.com/keys")
    )
    clock = FakeClock()
    key_server = KeyServer(
        digester=Digester(b"salt"),
        cache=InMemoryChallengeCache(clock=clock),
        store=InMemoryKeyStore(),
        ttl_seconds=60,
    )
    notifier = FakeNotifier()

    app.dependency_overrides[get_key_server] = lambda: key_server
    app.dependency_overrides[get_notifier] = lambda: notifier

    try:
        yield app, key_server, notifier, clock
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _, _, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def notifier(app_and_deps):
    return app_and_deps[2]
