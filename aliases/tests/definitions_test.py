import pytest

from aliases.core.exceptions import (
    BackendError,
    CorruptDefinition,
    DefinitionExists,
    DefinitionNotFound,
    DefinitionValidationError,
)
from aliases.db.Models.models import Definition
from aliases.services.definitions import DefinitionService


@pytest.mark.parametrize("fields, reason", [
    ({"type": "seq"}, "name required"),
    ({"name": "bad name", "type": "seq"}, "may only contain"),
    ({"name": "bad/name", "type": "seq"}, "may only contain"),
    ({"name": "t"}, "type required"),
    ({"name": "t", "type": "base64"}, "unknown type"),
    ({"name": "t", "type": "rand", "minlen": 3}, "min length"),
    ({"name": "t", "type": "rand", "chars": "abcdefg"}, "too few chars"),
])
def test_create_rejects_invalid_definitions(conn, fields, reason):
    with pytest.raises(DefinitionValidationError, match=reason):
        DefinitionService.create(conn, Definition(**fields))


def test_create_accepts_dotted_and_dashed_names(conn):
    created = DefinitionService.create(conn, Definition(name="A.b-c_9", type="uuid"))
    assert DefinitionService.get(conn, "A.b-c_9").id == created.id


def test_create_allocates_increasing_ids(conn):
    first = DefinitionService.create(conn, Definition(name="one", type="uuid"))
    second = DefinitionService.create(conn, Definition(name="two", type="rand"))
    assert first.id >= 1
    assert second.id > first.id


def test_create_applies_rand_defaults(conn):
    created = DefinitionService.create(conn, Definition(name="r", type="rand"))
    assert created.minlen == 8
    assert created.chars == "abcdefghijklmnopqrstuvwxyz0123456789"


def test_create_seeds_sequence_with_offset(conn, seq_definition):
    assert conn.get(f"s:{seq_definition.id}") == "100000"


def test_create_writes_no_counter_for_other_types(conn):
    created = DefinitionService.create(conn, Definition(name="u", type="uuid", offset=5))
    assert conn.exists(f"s:{created.id}") == 0


def test_create_duplicate_name(conn, seq_definition):
    with pytest.raises(DefinitionExists):
        DefinitionService.create(conn, Definition(name="t", type="uuid"))


def test_create_ignores_caller_supplied_id(conn):
    created = DefinitionService.create(conn, Definition(id=999, name="x", type="uuid"))
    assert created.id != 999
    assert DefinitionService.get(conn, "x").id == created.id


def test_get_missing(conn):
    with pytest.raises(DefinitionNotFound):
        DefinitionService.get(conn, "nope")


def test_get_returns_stored_configuration(conn, rand_definition):
    loaded = DefinitionService.get(conn, "r")
    assert loaded.model_dump() == rand_definition.model_dump()


def test_update_rename(conn, seq_definition):
    """Renaming releases the old name and keeps the id and configuration."""
    renamed = Definition(**{**seq_definition.model_dump(), "name": "t2"})
    DefinitionService.update(conn, "t", renamed)

    with pytest.raises(DefinitionNotFound):
        DefinitionService.get(conn, "t")

    loaded = DefinitionService.get(conn, "t2")
    assert loaded.id == seq_definition.id
    assert loaded.type == "seq"
    assert loaded.offset == 100000


def test_update_preserves_id(conn, seq_definition):
    updated = DefinitionService.update(conn, "t", Definition(id=12345, name="t", type="seq", offset=5))
    assert updated.id == seq_definition.id
    assert DefinitionService.get(conn, "t").id == seq_definition.id


def test_update_does_not_reset_sequence(conn, seq_definition):
    conn.incr(f"s:{seq_definition.id}")
    DefinitionService.update(conn, "t", Definition(name="t", type="seq", offset=0))
    assert conn.get(f"s:{seq_definition.id}") == "100001"


def test_update_to_seq_seeds_counter(conn, rand_definition):
    DefinitionService.update(conn, "r", Definition(name="r", type="seq", offset=50))
    assert conn.get(f"s:{rand_definition.id}") == "50"


def test_update_revalidates(conn, seq_definition):
    with pytest.raises(DefinitionValidationError):
        DefinitionService.update(conn, "t", Definition(name="t", type="rand", minlen=1))


def test_update_missing(conn):
    with pytest.raises(DefinitionNotFound):
        DefinitionService.update(conn, "nope", Definition(name="nope", type="uuid"))


def test_update_rename_onto_taken_name(conn, seq_definition, rand_definition):
    with pytest.raises(DefinitionExists):
        DefinitionService.update(conn, "t", Definition(name="r", type="seq"))
    assert DefinitionService.get(conn, "t").id == seq_definition.id
    assert DefinitionService.get(conn, "r").id == rand_definition.id


def test_delete_is_soft(conn, seq_definition):
    DefinitionService.delete(conn, "t")

    with pytest.raises(DefinitionNotFound):
        DefinitionService.get(conn, "t")

    listed = DefinitionService.list(conn)
    assert [(d.id, d.deleted) for d in listed] == [(seq_definition.id, True)]


def test_delete_releases_name_for_a_new_id(conn, seq_definition):
    DefinitionService.delete(conn, "t")
    recreated = DefinitionService.create(conn, Definition(name="t", type="uuid"))
    assert recreated.id != seq_definition.id


def test_delete_missing(conn):
    with pytest.raises(DefinitionNotFound):
        DefinitionService.delete(conn, "nope")


def test_list_returns_all_definitions(conn, seq_definition, rand_definition):
    assert [d.name for d in DefinitionService.list(conn)] == ["t", "r"]


def test_list_empty(conn):
    assert DefinitionService.list(conn) == []


def test_undecodable_value_is_corruption(conn, seq_definition):
    conn.set(f"v:{seq_definition.id}", "{not json")
    with pytest.raises(CorruptDefinition):
        DefinitionService.get(conn, "t")


def test_missing_value_is_corruption(conn, seq_definition):
    conn.delete(f"v:{seq_definition.id}")
    with pytest.raises(CorruptDefinition):
        DefinitionService.get(conn, "t")


def test_backend_failure_is_wrapped(conn, redis_server, seq_definition):
    redis_server.connected = False
    with pytest.raises(BackendError, match="get definition"):
        DefinitionService.get(conn, "t")
