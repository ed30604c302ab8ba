"""Core domain types shared across all insightbites modules."""

from insightbites.core.types import (
    COLUMN_FIELDS,
    County,
    FilterMode,
    ResultSet,
    ViewState,
    ViolationRecord,
    row_key,
)

__all__ = [
    "COLUMN_FIELDS",
    "County",
    "FilterMode",
    "ResultSet",
    "ViewState",
    "ViolationRecord",
    "row_key",
]
