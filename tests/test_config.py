from __future__ import annotations

import json

import pytest

from config import (
    GroupStore,
    dict_to_group,
    group_to_dict,
    load_username,
    save_username,
)
from group_ops import delete_member, new_group, rename_member


@pytest.fixture
def store(tmp_path):
    return GroupStore(str(tmp_path / "groups.json"))


def test_missing_file_is_empty(store):
    assert store.list() == []
    assert store.get("nope") is None
    assert store.delete("nope") is False


def test_round_trip(store, abc_group):
    abc_group.members[2].has_paid = True
    abc_group.expenses[0].receipt_image = "aGVsbG8="
    store.save(abc_group)
    assert store.get(abc_group.id) == abc_group
    assert store.list() == [abc_group]


def test_save_replaces_by_id(store, abc_group):
    store.save(abc_group)
    abc_group.name = "Asado 2"
    store.save(abc_group)
    groups = store.list()
    assert len(groups) == 1
    assert groups[0].name == "Asado 2"


def test_delete_and_reset(store, abc_group):
    other = new_group("Playa", [abc_group])
    store.save(abc_group)
    store.save(other)
    assert store.delete(abc_group.id) is True
    assert [g.id for g in store.list()] == [other.id]
    store.reset()
    assert store.list() == []
    store.reset()


def test_payer_name_written_from_current_members(store, abc_group):
    rename_member(abc_group, "a", "Alicia")
    store.save(abc_group)
    with open(store.path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["version"] == 1
    assert data["groups"][0]["expenses"][0]["payerName"] == "Alicia"

    delete_member(abc_group, "a")
    assert group_to_dict(abc_group)["expenses"][0]["payerName"] == "Desconocido"


def test_loads_legacy_records():
    g = dict_to_group({
        "id": "g1",
        "name": "Viejo",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "members": [{"id": "m1", "name": "Ana"}],
        "expenses": [{"id": "e1", "description": "Pizza", "amount": 12, "payerId": "m1",
                      "payerName": "stale", "participants": ["m1"], "individualShare": 12}],
    })
    assert g.members[0].has_paid is False
    e = g.expenses[0]
    assert e.amount == 12.0
    assert e.shares == []
    assert e.category == ""
    assert g.gathering_date is None


def test_reads_bare_list(store, abc_group):
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump([group_to_dict(abc_group)], f)
    assert store.list() == [abc_group]


def test_username(tmp_path):
    assert load_username(str(tmp_path)) == ""
    save_username("  Juan ", str(tmp_path))
    assert load_username(str(tmp_path)) == "Juan"
    with pytest.raises(ValueError):
        save_username("   ", str(tmp_path))


def test_corrupt_file_raises_value_error(store, abc_group):
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("{not json")
    with pytest.raises(ValueError):
        store.list()
    with pytest.raises(ValueError):
        store.save(abc_group)
