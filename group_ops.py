"""
Group, member and expense operations for GroupSplit.
Input is validated here, before anything reaches the settlement engine.
"""
from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from models import (
    EXPENSE_CATEGORIES,
    UNKNOWN_PAYER_ID,
    UNKNOWN_PAYER_NAME,
    Expense,
    Group,
    Member,
)
from computations import equal_shares
from utils import new_id, now_iso, parse_date

logger = logging.getLogger(__name__)


class GroupError(ValueError):
    """Invalid user input for a group operation"""


def _name_taken(name: str, names: Iterable[str]) -> bool:
    low = name.lower()
    return any(n.lower() == low for n in names)


def _check_date(d: Optional[str]) -> Optional[str]:
    if not d or not d.strip():
        return None
    try:
        parse_date(d)
    except ValueError:
        raise GroupError("La fecha debe tener el formato AAAA-MM-DD.")
    return d.strip()


# ---------- Groups ----------
def new_group(
    name: str,
    existing: Iterable[Group],
    gathering_date: Optional[str] = None,
    gathering_location: Optional[str] = None,
) -> Group:
    """Create a group whose name is unique (case-insensitive) among existing"""
    name = (name or "").strip()
    if not name:
        raise GroupError("El nombre del grupo no puede estar vacío.")
    if _name_taken(name, (g.name for g in existing)):
        raise GroupError(f"Ya existe un grupo llamado '{name}'.")
    return Group(
        id=new_id(),
        name=name,
        created_at=now_iso(),
        gathering_date=_check_date(gathering_date),
        gathering_location=(gathering_location or "").strip() or None,
    )


def update_group_info(
    group: Group,
    name: str,
    existing: Iterable[Group],
    gathering_date: Optional[str] = None,
    gathering_location: Optional[str] = None,
) -> None:
    name = (name or "").strip()
    if not name:
        raise GroupError("El nombre del grupo no puede estar vacío.")
    if _name_taken(name, (g.name for g in existing if g.id != group.id)):
        raise GroupError(f"Ya existe un grupo llamado '{name}'.")
    group.name = name
    group.gathering_date = _check_date(gathering_date)
    group.gathering_location = (gathering_location or "").strip() or None


# ---------- Members ----------
def find_member(group: Group, member_id: str) -> Optional[Member]:
    return next((m for m in group.members if m.id == member_id), None)


def payer_name(group: Group, expense: Expense) -> str:
    """Current name of the expense's payer, resolved from the member list"""
    if expense.payer_id == UNKNOWN_PAYER_ID:
        return UNKNOWN_PAYER_NAME
    m = find_member(group, expense.payer_id)
    return m.name if m else UNKNOWN_PAYER_NAME


def participant_names(group: Group, expense: Expense) -> List[str]:
    names = {m.id: m.name for m in group.members}
    return [names[mid] for mid in expense.participants if mid in names]


def add_member(group: Group, name: str) -> Member:
    name = (name or "").strip()
    if not name:
        raise GroupError("El nombre del miembro no puede estar vacío.")
    if _name_taken(name, (m.name for m in group.members)):
        raise GroupError("Este miembro ya existe en el grupo.")
    member = Member(id=new_id(), name=name)
    group.members.append(member)
    logger.info("added member %s to %s", name, group.name)
    return member


def rename_member(group: Group, member_id: str, name: str) -> Member:
    """Rename a member; payer names follow automatically since they are resolved on read"""
    name = (name or "").strip()
    if not name:
        raise GroupError("El nombre del miembro no puede estar vacío.")
    member = find_member(group, member_id)
    if member is None:
        raise GroupError("Miembro no encontrado.")
    if _name_taken(name, (m.name for m in group.members if m.id != member_id)):
        raise GroupError("Este miembro ya existe en el grupo.")
    member.name = name
    return member


def delete_member(group: Group, member_id: str) -> Member:
    """
    Remove a member. Expenses they paid are reassigned to the unknown payer and
    their shares are dropped. Amounts are not re-split among the remaining
    participants, so the shares of affected expenses no longer sum to the amount.
    """
    member = find_member(group, member_id)
    if member is None:
        raise GroupError("Miembro no encontrado.")
    group.members = [m for m in group.members if m.id != member_id]
    for e in group.expenses:
        if e.payer_id == member_id:
            e.payer_id = UNKNOWN_PAYER_ID
        if member_id in e.participants:
            e.participants = [mid for mid in e.participants if mid != member_id]
            e.shares = [s for s in e.shares if s.member_id != member_id]
    logger.info("deleted member %s from %s", member.name, group.name)
    return member


def toggle_paid(group: Group, member_id: str) -> bool:
    member = find_member(group, member_id)
    if member is None:
        raise GroupError("Miembro no encontrado.")
    member.has_paid = not member.has_paid
    return member.has_paid


# ---------- Expenses ----------
def build_expense(
    group: Group,
    description: str,
    amount: float,
    payer_id: str,
    participants: Iterable[str],
    category: str = EXPENSE_CATEGORIES[0],
    expense_id: Optional[str] = None,
    receipt_image: Optional[str] = None,
) -> Expense:
    """Validate user input and build an equally split expense"""
    description = (description or "").strip()
    if not description:
        raise GroupError("Por favor, ingresa una descripción.")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise GroupError("Por favor, ingresa un monto válido.")
    if not amount > 0:
        raise GroupError("Por favor, ingresa un monto válido.")
    if find_member(group, payer_id) is None:
        raise GroupError("Pagador no válido.")
    ids = {m.id for m in group.members}
    parts: List[str] = []
    for mid in participants:
        if mid in ids and mid not in parts:
            parts.append(mid)
    if not parts:
        raise GroupError("Selecciona al menos un participante para este gasto.")
    if category not in EXPENSE_CATEGORIES:
        raise GroupError(f"Categoría desconocida: {category}")

    return Expense(
        id=expense_id or new_id(),
        description=description,
        amount=amount,
        payer_id=payer_id,
        category=category,
        participants=parts,
        shares=equal_shares(amount, parts),
        receipt_image=receipt_image,
    )


def find_expense(group: Group, expense_id: str) -> Optional[Expense]:
    return next((e for e in group.expenses if e.id == expense_id), None)


def add_expense(group: Group, expense: Expense) -> None:
    group.expenses.append(expense)
    logger.info("added expense %s (%.2f) to %s", expense.description, expense.amount, group.name)


def replace_expense(group: Group, expense: Expense) -> None:
    for i, e in enumerate(group.expenses):
        if e.id == expense.id:
            group.expenses[i] = expense
            return
    raise GroupError("Gasto no encontrado.")


def delete_expense(group: Group, expense_id: str) -> None:
    if find_expense(group, expense_id) is None:
        raise GroupError("Gasto no encontrado.")
    group.expenses = [e for e in group.expenses if e.id != expense_id]


def set_receipt(group: Group, expense_id: str, image_b64: Optional[str]) -> None:
    e = find_expense(group, expense_id)
    if e is None:
        raise GroupError("Gasto no encontrado.")
    e.receipt_image = image_b64
