"""Filter selection → predicate translation.

A ViolationQuery is a value object: it renders as a SoQL ``$where`` clause
for server-side filtering and evaluates against a ViolationRecord for
in-memory filtering. Both renderings share the same predicates, so the
two filtering strategies select the same rows.

    build_query(state).where()
    # "insp_type in('Complaint','Follow-up') AND restcity='Dover'"
"""

import functools
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from insightbites.core.counties import COUNTY_MAP
from insightbites.core.types import County, FilterMode, ViolationRecord
from insightbites.filters.state import ZIP_CODE_LENGTH, FilterState

MIN_SEARCH_LENGTH = 3


def quote_literal(value: str) -> str:
    """Quote a string for SoQL, doubling embedded single quotes.

    "Joe's Diner" → "'Joe''s Diner'"
    """
    return "'" + value.replace("'", "''") + "'"


@functools.lru_cache(maxsize=256)
def like_pattern(pattern: str) -> re.Pattern:
    """Compile a SoQL LIKE pattern: % is any run of characters, _ is one character.

    like_pattern("%A_C%").fullmatch("ABC GRILL") → match
    """
    parts = [".*" if c == "%" else "." if c == "_" else re.escape(c) for c in pattern]
    return re.compile("".join(parts), re.DOTALL)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InPredicate:
    """Column value is one of a fixed set."""

    column: str
    values: tuple[str, ...]

    def to_soql(self) -> str:
        return f"{self.column} in({','.join(quote_literal(v) for v in self.values)})"

    def matches(self, record: ViolationRecord) -> bool:
        return record.column(self.column) in self.values


@dataclass(frozen=True)
class EqualsPredicate:
    """Column value equals a literal exactly."""

    column: str
    value: str

    def to_soql(self) -> str:
        return f"{self.column}={quote_literal(self.value)}"

    def matches(self, record: ViolationRecord) -> bool:
        return record.column(self.column) == self.value


@dataclass(frozen=True)
class ContainsPredicate:
    """Case-insensitive LIKE '%text%'; % and _ in the text stay wildcards."""

    column: str
    text: str

    @property
    def pattern(self) -> str:
        return "%" + self.text + "%"

    def to_soql(self) -> str:
        return f"upper({self.column}) like upper({quote_literal(self.pattern)})"

    def matches(self, record: ViolationRecord) -> bool:
        # Same semantics as the server: % and _ in the search text are wildcards
        value = record.column(self.column) or ""
        return like_pattern(self.pattern.upper()).fullmatch(value.upper()) is not None


Predicate = InPredicate | EqualsPredicate | ContainsPredicate


@dataclass(frozen=True)
class ViolationQuery:
    """All active predicates, combined with AND."""

    predicates: tuple[Predicate, ...] = ()

    @property
    def is_unfiltered(self) -> bool:
        return not self.predicates

    def where(self) -> str:
        """Render as a SoQL $where clause ('' when there is nothing to filter)."""
        return " AND ".join(p.to_soql() for p in self.predicates)

    def matches(self, record: ViolationRecord) -> bool:
        return all(p.matches(record) for p in self.predicates)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def _zip_is_complete(zip_code: str) -> bool:
    return len(zip_code) == ZIP_CODE_LENGTH and zip_code.isdigit()


def build_query(
    state: FilterState,
    county_map: Mapping[County, Iterable[str]] = COUNTY_MAP,
    base_inspection_types: Iterable[str] = (),
) -> ViolationQuery:
    """Translate the current filter selection into a ViolationQuery.

    Incomplete input (no county picked, empty city, partial zip, search
    shorter than MIN_SEARCH_LENGTH) adds no predicate, so the base result
    stays visible.
    """
    predicates: list[Predicate] = []

    base_types = tuple(base_inspection_types)
    if base_types:
        predicates.append(InPredicate("insp_type", base_types))

    mode = state.mode
    if mode == FilterMode.COUNTY and state.selected_county is not None:
        predicates.append(InPredicate("restcity", tuple(county_map[state.selected_county])))
    elif mode == FilterMode.CITY and state.selected_city:
        predicates.append(EqualsPredicate("restcity", state.selected_city))
    elif mode == FilterMode.ZIPCODE and _zip_is_complete(state.selected_zip_code):
        predicates.append(EqualsPredicate("restzip", state.selected_zip_code))
    elif mode == FilterMode.RESTAURANT and len(state.debounced_search_text) >= MIN_SEARCH_LENGTH:
        predicates.append(ContainsPredicate("restname", state.debounced_search_text))

    return ViolationQuery(tuple(predicates))
