from __future__ import annotations

from typing import Iterable, Optional, Union

from ..core.exceptions import ValidationError


def require_positive_id(value, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if ident <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return ident


def normalize_user_types(value: Optional[Union[str, Iterable[str]]]) -> frozenset[str]:
    """Collapse the role shapes seen at the edges into one set of lowercase keys.

    Accepts None, a single key, a comma-joined string ("Manager, Barista") or any
    iterable of keys.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = value
    return frozenset(str(p).strip().lower() for p in parts if p is not None and str(p).strip())
