"""
Reusable Pydantic validators for partial-update schemas.
"""

from typing import Any


def reject_null(value: Any) -> Any:
    """Fields that may be omitted from a patch but can't be cleared."""
    if value is None:
        raise ValueError("may not be null")
    return value
