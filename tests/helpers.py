from __future__ import annotations

from models import Expense, Group, Member
from computations import equal_shares


def make_group(*names, paid=()):
    """Group whose member ids are the lower-cased names"""
    members = [Member(id=n.lower(), name=n, has_paid=n in paid) for n in names]
    return Group(id="g1", name="Asado", members=members, created_at="2024-05-01T12:00:00+00:00")


def make_expense(eid, amount, payer_id, participants, description="Carne", category="Comida"):
    return Expense(
        id=eid,
        description=description,
        amount=amount,
        payer_id=payer_id,
        category=category,
        participants=list(participants),
        shares=equal_shares(amount, participants),
    )
