"""
Data models for GroupSplit application
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Payer sentinel for expenses whose payer was removed from the group
UNKNOWN_PAYER_ID = "unknown"
UNKNOWN_PAYER_NAME = "Desconocido"

EXPENSE_CATEGORIES = [
    "Comida",
    "Bebida",
    "Alcohol",
    "Carbon",
    "Transporte",
    "Alojamiento",
    "Entretenimiento",
    "Otros",
]


@dataclass
class Member:
    """Participant in a group"""
    id: str
    name: str
    has_paid: bool = False


@dataclass
class ShareEntry:
    """Portion of an expense owed by one member"""
    member_id: str
    share: float


@dataclass
class Expense:
    """Single payment made by one member on behalf of others"""
    id: str
    description: str
    amount: float
    payer_id: str
    category: str
    participants: List[str] = field(default_factory=list)  # member ids
    shares: List[ShareEntry] = field(default_factory=list)
    receipt_image: Optional[str] = None  # base64 jpeg


@dataclass
class Group:
    """A gathering with its members and expenses"""
    id: str
    name: str
    members: List[Member] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    created_at: str = ""  # ISO timestamp
    gathering_date: Optional[str] = None  # YYYY-MM-DD
    gathering_location: Optional[str] = None


@dataclass
class Transaction:
    """Suggested transfer from a debtor to a creditor"""
    from_member: Member
    to_member: Member
    amount: float


@dataclass
class Totals:
    """Totals and per-member balances of a group"""
    total_spent: float
    each_should_pay: float
    balances: Dict[str, float]  # member id -> paid - owed
