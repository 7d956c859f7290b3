from __future__ import annotations

import pytest

from tests.helpers import make_expense, make_group


@pytest.fixture
def abc_group():
    """A paid 30 for A, B and C"""
    g = make_group("A", "B", "C")
    g.expenses.append(make_expense("e1", 30.0, "a", ["a", "b", "c"]))
    return g
