"""Presentation helpers — summary text, table rows and cards.

The table (wide screens) and the cards (narrow screens) are two layouts
of the same records in the same order, sharing the same derived keys.
"""

from collections.abc import Sequence
from datetime import date

from insightbites.core.types import ViewState, ViolationRecord, row_key

LOADING_MESSAGE = "Loading violations..."
SEARCHING_MESSAGE = "Searching..."
EMPTY_MESSAGE = "No violations found"
EMPTY_HINT = "Try adjusting your search or filter"

TABLE_COLUMNS = (
    "Restaurant Name",
    "Address",
    "City",
    "Violation",
    "Description",
    "Inspection Type",
    "Inspection Date",
)


def format_date(value: date | None) -> str:
    """date(2024, 3, 5) → '03/05/2024'"""
    return value.strftime("%m/%d/%Y") if value else ""


def summary_lines(state: ViewState) -> list[str]:
    """Heading and status line for the current view.

    Before the first load only the loading message is shown; a fetch
    failure replaces everything with the error message.
    """
    if state.loading:
        return [LOADING_MESSAGE]
    if state.error:
        return [state.error]

    result = state.result
    lines = [f"Total Matching Violations: {result.total_count:,}"]
    if state.fetching:
        lines.append(SEARCHING_MESSAGE)
    else:
        lines.append(f"Showing {len(result.rows)} most recent violations")
    if not result.rows:
        lines.extend([EMPTY_MESSAGE, EMPTY_HINT])
    return lines


def table_rows(rows: Sequence[ViolationRecord]) -> list[dict]:
    return [
        {
            "key": row_key(record, i),
            "cells": (
                record.restaurant_name,
                record.address,
                record.city,
                record.violation_code,
                record.violation_description,
                record.inspection_type or "",
                format_date(record.inspection_date),
            ),
        }
        for i, record in enumerate(rows)
    ]


def cards(rows: Sequence[ViolationRecord]) -> list[dict]:
    return [
        {
            "key": row_key(record, i),
            "name": record.restaurant_name,
            "address": f"{record.address}, {record.city}",
            "violation": record.violation_code,
            "description": record.violation_description,
            "inspection_type": record.inspection_type or "",
            "date": format_date(record.inspection_date),
        }
        for i, record in enumerate(rows)
    ]


# ---------------------------------------------------------------------------
# Plain-text rendering (CLI)
# ---------------------------------------------------------------------------

_MAX_CELL = 40


def _clip(text: str, width: int = _MAX_CELL) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def render_table(rows: Sequence[ViolationRecord]) -> str:
    body = [tuple(_clip(c) for c in row["cells"]) for row in table_rows(rows)]
    widths = [
        max([len(header)] + [len(r[col]) for r in body])
        for col, header in enumerate(TABLE_COLUMNS)
    ]
    lines = [
        "  ".join(h.ljust(w) for h, w in zip(TABLE_COLUMNS, widths)),
        "  ".join("─" * w for w in widths),
    ]
    lines.extend("  ".join(c.ljust(w) for c, w in zip(r, widths)) for r in body)
    return "\n".join(lines)


def render_cards(rows: Sequence[ViolationRecord]) -> str:
    blocks = []
    for card in cards(rows):
        blocks.append("\n".join([
            card["name"],
            f"  {card['address']}",
            f"  Violation: {card['violation']}",
            f"  {card['description']}",
            f"  {card['inspection_type']}  {card['date']}".rstrip(),
        ]))
    return "\n\n".join(blocks)
