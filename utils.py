"""
Utility functions for GroupSplit application
"""
from __future__ import annotations
import os
import uuid
from datetime import date, datetime, timezone


def now_iso() -> str:
    """Current UTC timestamp as ISO string"""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def format_created(ts: str) -> str:
    """Render an ISO timestamp as a local date, or the raw value if unparseable"""
    try:
        return datetime.fromisoformat(ts).date().isoformat()
    except (TypeError, ValueError):
        return ts or ""


def safe_float(x: str, default: float = 0.0) -> float:
    """Convert string to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def app_dir() -> str:
    """
    Get application data directory: ~/.groupsplit
    Creates directory if it doesn't exist.
    """
    path = os.path.expanduser(os.path.join("~", ".groupsplit"))
    os.makedirs(path, exist_ok=True)
    return path
