from __future__ import annotations

import csv

import pytest

from computations import compute_totals
from csv_handler import CSV_HEADER, export_groups_to_csv
from group_ops import delete_member
from tests.helpers import make_expense, make_group


def _read(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_export_rows(tmp_path, abc_group):
    abc_group.gathering_date = "2024-06-01"
    abc_group.expenses.append(make_expense("e2", 10.0, "b", ["b", "c"], description="Hielo"))
    path = tmp_path / "out.csv"

    assert export_groups_to_csv([abc_group], str(path)) == 2
    rows = _read(path)
    assert rows[0] == CSV_HEADER
    assert rows[1] == ["Asado", "A", "Carne", "30.00", "A", "A;B;C", "10.00", "2024-05-01", "2024-06-01"]
    assert rows[2][2:7] == ["Hielo", "10.00", "B", "B;C", "5.00"]


def test_group_without_expenses_gets_placeholder(tmp_path):
    g = make_group("A")
    path = tmp_path / "out.csv"
    export_groups_to_csv([g], str(path))
    rows = _read(path)
    assert rows[1] == ["Asado", "N/A", "N/A", "0.00", "N/A", "N/A", "0.00", "2024-05-01", "N/A"]


def test_deleted_payer_exported_as_unknown(tmp_path, abc_group):
    delete_member(abc_group, "a")
    path = tmp_path / "out.csv"
    export_groups_to_csv([abc_group], str(path))
    row = _read(path)[1]
    assert row[1] == "Desconocido"
    assert row[5] == "B;C"
    # shares are not re-split: B still owes the original third
    assert row[6] == "10.00"
    assert float(row[6]) == pytest.approx(-compute_totals(abc_group).balances["b"])


def test_share_falls_back_to_participants(tmp_path):
    g = make_group("A", "B")
    e = make_expense("e1", 8.0, "a", ["a", "b"])
    e.shares = []
    g.expenses.append(e)
    path = tmp_path / "out.csv"
    export_groups_to_csv([g], str(path))
    assert _read(path)[1][6] == "4.00"
