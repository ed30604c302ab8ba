"""Domain types for the InsightBites restaurant violation viewer.

All shared dataclasses and enums live here to prevent circular imports
and establish a single source of truth for the domain model.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


# ---------------------------------------------------------------------------
# Filter vocabulary
# ---------------------------------------------------------------------------

class FilterMode(str, Enum):
    """Which filter dimension the viewer is currently sorting by."""

    NONE = "none"
    COUNTY = "county"
    CITY = "city"
    ZIPCODE = "zipcode"
    RESTAURANT = "restaurant"


class County(str, Enum):
    SUSSEX = "Sussex"
    KENT = "Kent"
    NEW_CASTLE = "New Castle"


# ---------------------------------------------------------------------------
# Dataset columns (Socrata field names) → ViolationRecord attributes
# ---------------------------------------------------------------------------

COLUMN_FIELDS: dict[str, str] = {
    "restname": "restaurant_name",
    "restaddress": "address",
    "restcity": "city",
    "restzip": "zip_code",
    "insp_date": "inspection_date",
    "insp_type": "inspection_type",
    "violation": "violation_code",
    "vio_desc": "violation_description",
}


@dataclass(frozen=True)
class ViolationRecord:
    """One inspection violation row. No stable ID; lists key rows with row_key()."""

    restaurant_name: str
    address: str
    city: str
    zip_code: str
    inspection_date: date | None
    violation_code: str
    violation_description: str
    inspection_type: str | None = None

    def column(self, name: str):
        """Return the value stored for a dataset column name (e.g. 'restcity')."""
        return getattr(self, COLUMN_FIELDS[name])


def row_key(record: ViolationRecord, index: int) -> str:
    """Derived list key: name + date + position."""
    when = record.inspection_date.isoformat() if record.inspection_date else ""
    return f"{record.restaurant_name}|{when}|{index}"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResultSet:
    """A complete, immutable answer for one filter selection."""

    total_count: int = 0
    rows: tuple[ViolationRecord, ...] = ()
    cities: tuple[str, ...] = ()


@dataclass
class ViewState:
    """Observable fetch lifecycle for one viewer session."""

    result: ResultSet = field(default_factory=ResultSet)
    cities: tuple[str, ...] = ()
    loading: bool = True
    fetching: bool = False
    error: str | None = None
