# app/domain/parsing.py
from __future__ import annotations

from typing import Any


def to_float(x: Any) -> float | None:
    if x is None or x == "":
        return None
    try:
        return float(x)
    except Exception:
        return None


def get_first(payload: dict[str, Any], *keys: str) -> Any:
    """Return first non-empty key from payload."""
    for k in keys:
        v = payload.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def get_nested(payload: dict[str, Any], path: str) -> Any:
    """Tiny dot-path getter: 'address.line1' or 'geometry.location.lat'."""
    cur: Any = payload
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
        if cur is None:
            return None
    return cur


def normalize_category(x: Any) -> str:
    """'  Weight Loss ' -> 'weight loss'"""
    return " ".join(str(x).split()).lower()


def normalize_categories(items: Any) -> frozenset[str]:
    if not items:
        return frozenset()
    if isinstance(items, str):
        items = [items]
    return frozenset(c for c in (normalize_category(i) for i in items) if c)
