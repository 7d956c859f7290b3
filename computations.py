"""
Business logic and computations for GroupSplit
"""
from __future__ import annotations
import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from models import Expense, Group, Member, ShareEntry, Totals, Transaction

logger = logging.getLogger(__name__)

# Amounts at or below this are rounding dust, not debts
SETTLE_EPS = 0.01

NO_CATEGORY = "Sin Categoría"
NO_DESCRIPTION = "Sin Descripción"

CONSEQUENCES = [
    "lavar todos los platos de la juntada.",
    "comprar la próxima ronda de bebidas.",
    "ser el DJ de la próxima juntada (sin quejas).",
    "limpiar el asador después de la próxima comida.",
    "contar un chiste malo cada 10 minutos por una hora.",
    "hacer un baile ridículo para todos.",
    "preparar los snacks para la próxima reunión.",
    "ser el chofer designado de la próxima salida.",
    "organizar la próxima juntada (¡todo incluido!).",
    "usar un sombrero ridículo por el resto del día.",
]


def equal_shares(amount: float, participants: Sequence[str]) -> List[ShareEntry]:
    """Split amount equally among participants, one entry per participant"""
    if not participants:
        return []
    each = float(amount) / len(participants)
    return [ShareEntry(member_id=mid, share=each) for mid in participants]


def expense_owed(e: Expense) -> List[Tuple[str, float]]:
    """
    (member_id, owed) pairs for an expense.
    Uses stored shares; falls back to an equal split over participants.
    """
    if e.shares:
        return [(s.member_id, float(s.share)) for s in e.shares]
    return [(s.member_id, s.share) for s in equal_shares(e.amount, e.participants)]


def individual_share(e: Expense) -> float:
    """Per-participant share as charged by compute_totals; 0 when nobody owes"""
    owed = expense_owed(e)
    return owed[0][1] if owed else 0.0


def compute_totals(group: Group) -> Totals:
    """
    Compute total spent, the equal-split reference and per-member balances.
    Balance = paid - owed; positive -> should receive, negative -> should pay.
    References to members that no longer exist are ignored.
    """
    members = group.members
    if not members:
        return Totals(total_spent=0.0, each_should_pay=0.0, balances={})

    paid = {m.id: 0.0 for m in members}
    owed = {m.id: 0.0 for m in members}
    total = 0.0

    for e in group.expenses:
        total += float(e.amount)
        if e.payer_id in paid:
            paid[e.payer_id] += float(e.amount)
        for mid, share in expense_owed(e):
            if mid in owed:
                owed[mid] += share

    balances = {m.id: paid[m.id] - owed[m.id] for m in members}
    each = total / len(members)
    logger.debug("totals for %s: spent=%.2f each=%.2f", group.name, total, each)
    return Totals(total_spent=total, each_should_pay=each, balances=balances)


def compute_transactions(group: Group, balances: Dict[str, float]) -> List[Transaction]:
    """
    Greedy settlement among members not marked as paid.
    Largest debtor pays largest creditor until one side runs out.
    """
    debtors: List[Tuple[Member, float]] = []
    creditors: List[Tuple[Member, float]] = []
    for m in group.members:
        if m.has_paid or m.id not in balances:
            continue
        bal = balances[m.id]
        if bal < 0:
            debtors.append((m, -bal))
        elif bal > 0:
            creditors.append((m, bal))

    # sort() is stable: ties keep member order
    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    transactions = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, damt = debtors[i]
        creditor, camt = creditors[j]
        x = min(damt, camt)
        if x > SETTLE_EPS:
            transactions.append(Transaction(from_member=debtor, to_member=creditor, amount=x))
            damt -= x
            camt -= x
            debtors[i] = (debtor, damt)
            creditors[j] = (creditor, camt)
        if damt <= SETTLE_EPS:
            i += 1
        if camt <= SETTLE_EPS:
            j += 1

    return transactions


def settle_group(group: Group) -> Tuple[Totals, List[Transaction]]:
    """Totals and settling transactions in one call"""
    totals = compute_totals(group)
    return totals, compute_transactions(group, totals.balances)


def pick_random_recipient(candidates: Sequence[Member], rng=None) -> Optional[Member]:
    """Uniformly pick one member; None when there is nobody to pick"""
    if not candidates:
        return None
    rng = rng or random
    return candidates[rng.randrange(len(candidates))]


def pick_mouse(group: Group, balances: Dict[str, float], rng=None) -> Optional[Tuple[Member, str]]:
    """
    The unpaid member with the largest outstanding debt, with a random consequence.
    Returns None if nobody owes more than the dust threshold.
    """
    mice = [m for m in group.members
            if not m.has_paid and balances.get(m.id, 0.0) < -SETTLE_EPS]
    if not mice:
        return None
    mice.sort(key=lambda m: balances[m.id])
    rng = rng or random
    return mice[0], rng.choice(CONSEQUENCES)


def spending_by_description(group: Group) -> Dict[str, float]:
    """Total amount per expense description"""
    out: Dict[str, float] = {}
    for e in group.expenses:
        desc = e.description or NO_DESCRIPTION
        out[desc] = out.get(desc, 0.0) + float(e.amount)
    return out


def spending_by_category(group: Group) -> Dict[str, float]:
    """Total amount per expense category"""
    out: Dict[str, float] = {}
    for e in group.expenses:
        cat = e.category or NO_CATEGORY
        out[cat] = out.get(cat, 0.0) + float(e.amount)
    return out


def paid_by_member(group: Group) -> Dict[str, float]:
    """Amount paid by each current member, in member order"""
    paid = {m.id: 0.0 for m in group.members}
    for e in group.expenses:
        if e.payer_id in paid:
            paid[e.payer_id] += float(e.amount)
    return paid
