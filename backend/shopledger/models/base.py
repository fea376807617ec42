"""Shared helpers for record identifiers and rounding."""
import time
import uuid

# Rounding after every step keeps add-then-subtract exact for cent values
MONEY_PLACES = 2
QTY_PLACES = 3


def new_id(prefix: str) -> str:
    """Timestamped id with a random suffix, e.g. ``INV-1718000000000-3f9a1c``."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def money(value: float) -> float:
    return round(float(value or 0.0), MONEY_PLACES) + 0.0


def qty(value: float) -> float:
    return round(float(value or 0.0), QTY_PLACES) + 0.0
