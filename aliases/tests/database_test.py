import fakeredis
import pytest
import redis
from fastapi.testclient import TestClient

from aliases.db.Connection import database
from aliases.main import app
from aliases.schemas.IdentAlias import IdentAlias
from aliases.services.aliases import AliasService


@pytest.fixture
def unreachable_pool(monkeypatch):
    """Point the shared pool at a port nothing listens on."""
    pool = redis.BlockingConnectionPool(
        host="127.0.0.1",
        port=1,
        decode_responses=True,
        max_connections=2,
        timeout=1,
        socket_connect_timeout=0.5,
    )
    monkeypatch.setattr(database, "pool", pool)
    yield pool
    pool.disconnect()


def test_get_redis_does_not_connect(unreachable_pool):
    dependency = database.get_redis()
    conn = next(dependency)
    assert conn.connection_pool is unreachable_pool
    dependency.close()


def test_unreachable_backend_is_reported_as_unavailable(unreachable_pool):
    client = TestClient(app)

    response = client.get("/defs/x")
    assert response.status_code == 503
    assert response.json()["detail"].startswith("get definition")


def test_ready_reports_unreachable_backend(unreachable_pool):
    client = TestClient(app)

    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["ready"] is False
    assert response.json()["details"]["redis"].startswith("error")


def test_engine_runs_on_a_single_connection(redis_server, seq_definition):
    """Plain commands and transactions share one pooled connection in turn."""
    pool = redis.BlockingConnectionPool(
        connection_class=fakeredis.FakeConnection,
        server=redis_server,
        decode_responses=True,
        max_connections=1,
        timeout=1,
    )
    conn = redis.Redis(connection_pool=pool)

    results = AliasService.assign(conn, seq_definition, ["a", "b"])
    assert [r.alias for r in results] == ["100001", "100002"]

    assert AliasService.put(conn, seq_definition, [IdentAlias(ident="a", alias="x")]) == 1
    assert AliasService.delete(conn, seq_definition, ["b"]).removed == 1
    pool.disconnect()
