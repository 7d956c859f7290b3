"""
Configuration and data loading/saving for GroupSplit
"""
from __future__ import annotations
import json
import logging
import os
from typing import List, Optional

from models import Expense, Group, Member, ShareEntry
from group_ops import payer_name
from utils import app_dir

logger = logging.getLogger(__name__)

STORE_VERSION = 1
GROUPS_FILE = "groups.json"
SETTINGS_FILE = "settings.json"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging once for the application"""
    logging.basicConfig(level=level, format=LOG_FORMAT)


# ---------- Serialization ----------
def expense_to_dict(e: Expense, payer: str = "") -> dict:
    return {
        "id": e.id,
        "description": e.description,
        "amount": e.amount,
        "payerId": e.payer_id,
        "payerName": payer,  # informational only, recomputed on read
        "category": e.category,
        "splitType": "equal",
        "participants": list(e.participants),
        "shares": [{"memberId": s.member_id, "share": s.share} for s in e.shares],
        "receiptImage": e.receipt_image,
    }


def dict_to_expense(d: dict) -> Expense:
    return Expense(
        id=d["id"],
        description=d.get("description", ""),
        amount=float(d.get("amount", 0.0)),
        payer_id=d.get("payerId", ""),
        category=d.get("category", ""),
        participants=list(d.get("participants") or []),
        shares=[ShareEntry(member_id=s["memberId"], share=float(s["share"]))
                for s in d.get("shares") or []],
        receipt_image=d.get("receiptImage"),
    )


def group_to_dict(group: Group) -> dict:
    """Convert Group object to dictionary for JSON serialization"""
    return {
        "id": group.id,
        "name": group.name,
        "createdAt": group.created_at,
        "gatheringDate": group.gathering_date,
        "gatheringLocation": group.gathering_location,
        "members": [{"id": m.id, "name": m.name, "hasPaid": m.has_paid} for m in group.members],
        "expenses": [expense_to_dict(e, payer_name(group, e)) for e in group.expenses],
    }


def dict_to_group(d: dict) -> Group:
    """Convert dictionary from JSON to Group object"""
    return Group(
        id=d["id"],
        name=d.get("name", ""),
        members=[Member(id=m["id"], name=m.get("name", ""), has_paid=bool(m.get("hasPaid", False)))
                 for m in d.get("members") or []],
        expenses=[dict_to_expense(e) for e in d.get("expenses") or []],
        created_at=d.get("createdAt", ""),
        gathering_date=d.get("gatheringDate"),
        gathering_location=d.get("gatheringLocation"),
    )


# ---------- Store ----------
class GroupStore:
    """Groups persisted as one JSON document"""

    def __init__(self, path: Optional[str] = None):
        self.path = path or os.path.join(app_dir(), GROUPS_FILE)

    def _read(self) -> List[dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        if isinstance(data, list):  # bare array of groups
            return data
        return list(data.get("groups", []))

    def _write(self, groups: List[dict]) -> None:
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump({"version": STORE_VERSION, "groups": groups}, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def list(self) -> List[Group]:
        return [dict_to_group(d) for d in self._read()]

    def get(self, group_id: str) -> Optional[Group]:
        for d in self._read():
            if d.get("id") == group_id:
                return dict_to_group(d)
        return None

    def save(self, group: Group) -> None:
        """Insert or replace a group by id"""
        groups = self._read()
        gd = group_to_dict(group)
        for i, d in enumerate(groups):
            if d.get("id") == group.id:
                groups[i] = gd
                break
        else:
            groups.append(gd)
        self._write(groups)
        logger.info("saved group %s (%d members, %d expenses)",
                    group.name, len(group.members), len(group.expenses))

    def delete(self, group_id: str) -> bool:
        groups = self._read()
        kept = [d for d in groups if d.get("id") != group_id]
        if len(kept) == len(groups):
            return False
        self._write(kept)
        logger.info("deleted group %s", group_id)
        return True

    def reset(self) -> None:
        """Remove every group"""
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        logger.info("removed all groups")


# ---------- Settings ----------
def _settings_path(base: Optional[str]) -> str:
    return os.path.join(base or app_dir(), SETTINGS_FILE)


def load_username(base: Optional[str] = None) -> str:
    """Load the local display name, empty if never set"""
    try:
        with open(_settings_path(base), "r", encoding="utf-8") as f:
            data = json.load(f)
        return str(data.get("username", ""))
    except FileNotFoundError:
        return ""


def save_username(name: str, base: Optional[str] = None) -> None:
    name = (name or "").strip()
    if not name:
        raise ValueError("El nombre de usuario no puede estar vacío.")
    with open(_settings_path(base), "w", encoding="utf-8") as f:
        json.dump({"username": name}, f, ensure_ascii=False, indent=2)
