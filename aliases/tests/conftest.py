import fakeredis
import pytest
import redis
from fastapi.testclient import TestClient

from aliases.main import app
from aliases.db import repository
from aliases.db.Connection import database
from aliases.db.Models.models import Definition
from aliases.services.definitions import DefinitionService


def _connect(server):
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def redis_server():
    """A fresh in-memory Redis server for each test."""
    return fakeredis.FakeServer()


@pytest.fixture
def conn(redis_server):
    c = _connect(redis_server)
    yield c
    c.close()


@pytest.fixture
def other_conn(redis_server):
    """A second client on the same server, standing in for another worker."""
    c = _connect(redis_server)
    yield c
    c.close()


@pytest.fixture
def client(redis_server):
    """Creates a test client with overridden Redis dependency."""
    def override_get_redis():
        c = _connect(redis_server)
        try:
            yield c
        finally:
            c.close()

    app.dependency_overrides[database.get_redis] = override_get_redis
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seq_definition(conn):
    return DefinitionService.create(conn, Definition(name="t", type="seq", offset=100000))


@pytest.fixture
def rand_definition(conn):
    return DefinitionService.create(conn, Definition(name="r", type="rand", chars="abcdefgh", minlen=4, prefix="r-"))


@pytest.fixture
def interleave(monkeypatch):
    """Queue callbacks to run between WATCH and MULTI of the next transaction.

    This reproduces a concurrent writer landing inside the check-then-commit
    window deterministically.
    """
    pending = []
    original = redis.client.Pipeline.multi

    def multi(self):
        while pending:
            pending.pop(0)()
        return original(self)

    monkeypatch.setattr(redis.client.Pipeline, "multi", multi)
    return pending.append


@pytest.fixture
def assert_consistent(conn):
    """Every forward alias has a reverse marker and vice versa."""
    def check(def_id):
        forward = {conn.get(key) for key in conn.scan_iter(match=f"k:{def_id}:*")}
        prefix = repository.reverse_key(def_id, "")
        reverse = {key[len(prefix):] for key in conn.scan_iter(match=f"a:{def_id}:*")}
        assert forward == reverse
    return check
