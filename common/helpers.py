"""
Blackbasket - Shared Helpers
=============================
Pure utility functions with NO database or module dependencies.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def safe_int(value: Optional[str]) -> Optional[int]:
    """Safely convert a string to int. Returns None on failure."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def to_money(value) -> Decimal:
    """Quantize any numeric value to two decimal places."""
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def money_float(value) -> float:
    """JSON-friendly rendering of a money amount."""
    if value is None:
        return 0.0
    return float(to_money(value))


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
