import pytest

from keyserver.application.key_server import KeyServer
from keyserver.domain.services import Digester
from keyserver.infrastructure.memory.challenge_cache import InMemoryChallengeCache
from keyserver.infrastructure.memory.key_store import InMemoryKeyStore
from tests.fakes import TTL, FakeClock, make_keypair


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def cache(clock):
    return InMemoryChallengeCache(clock=clock)


@pytest.fixture()
def store():
    return InMemoryKeyStore()


@pytest.fixture()
def digester():
    return Digester(b"salt")


@pytest.fixture()
def key_server(digester, cache, store):
    return KeyServer(digester=digester, cache=cache, store=store, ttl_seconds=TTL)


@pytest.fixture()
def keypair():
    return make_keypair()
