"""
Shared validation utilities for API endpoints.
"""

from typing import Any, Iterable, List, Optional, Tuple
from fastapi import HTTPException, status


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_field(value: Any, label: str) -> Any:
    """
    Ensure a request field is present and non-empty.

    Args:
        value: The value to check
        label: Human-readable field name used in the error message

    Returns:
        The value unchanged

    Raises:
        HTTPException: 400 "<label> is required" when the value is missing
    """
    if is_blank(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} is required"
        )
    return value


def require_fields(fields: Iterable[Tuple[Any, str]]) -> None:
    """Check (value, label) pairs in order, failing on the first missing one."""
    for value, label in fields:
        require_field(value, label)


def changed_fields(current: Any, candidates: dict) -> dict:
    """
    Return the candidate values that are non-empty and differ from `current`.

    Args:
        current: ORM object holding the stored values
        candidates: Mapping of attribute name to requested value

    Returns:
        Mapping of attribute name to new value for the fields that changed
    """
    return {
        name: value
        for name, value in candidates.items()
        if not is_blank(value) and value != getattr(current, name)
    }


def unique_ids(ids: Optional[List[int]]) -> List[int]:
    """Deduplicate ids while keeping their order."""
    return list(dict.fromkeys(ids or []))
