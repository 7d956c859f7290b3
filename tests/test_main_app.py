from __future__ import annotations

from types import SimpleNamespace

import pytest

pytest.importorskip("tkinter")

import main_app  # noqa: E402
from config import GroupStore  # noqa: E402


class _Boxes:
    def __init__(self):
        self.errors = []

    def showerror(self, title, message, **kwargs):
        self.errors.append((title, message))


@pytest.fixture
def boxes(monkeypatch):
    b = _Boxes()
    monkeypatch.setattr(main_app, "messagebox", b)
    return b


def test_store_call_reports_corrupt_file(tmp_path, boxes, abc_group):
    store = GroupStore(str(tmp_path / "groups.json"))
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("{not json")

    ok = main_app.GroupSplitApp._store_call(SimpleNamespace(), "Save failed", store.save, abc_group)

    assert ok is False
    assert [t for t, _ in boxes.errors] == ["Save failed"]


def test_store_call_reports_os_error(boxes):
    def fail():
        raise PermissionError("read-only")

    assert main_app.GroupSplitApp._store_call(SimpleNamespace(), "Delete failed", fail) is False
    assert boxes.errors == [("Delete failed", "read-only")]


def test_store_call_success(tmp_path, boxes, abc_group):
    store = GroupStore(str(tmp_path / "groups.json"))
    assert main_app.GroupSplitApp._store_call(SimpleNamespace(), "Save failed", store.save, abc_group) is True
    assert boxes.errors == []
    assert store.get(abc_group.id) == abc_group
