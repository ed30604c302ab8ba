"""Tests for summary text, table rows and cards."""

from datetime import date

from insightbites.core.types import ResultSet, ViewState, ViolationRecord
from insightbites.views import (
    EMPTY_HINT,
    EMPTY_MESSAGE,
    LOADING_MESSAGE,
    SEARCHING_MESSAGE,
    TABLE_COLUMNS,
    cards,
    format_date,
    render_cards,
    render_table,
    summary_lines,
    table_rows,
)


def _record(name: str, when: date | None, **kwargs) -> ViolationRecord:
    fields = {
        "address": "1 Main St",
        "city": "Dover",
        "zip_code": "19901",
        "violation_code": "2-301.14",
        "violation_description": "Hands not washed",
        "inspection_type": "Complaint",
    }
    fields.update(kwargs)
    return ViolationRecord(restaurant_name=name, inspection_date=when, **fields)


ROWS = (
    _record("Joe's Diner", date(2024, 3, 5)),
    _record("Joe's Diner", date(2024, 3, 5)),
    _record("Crab Shack", date(2023, 11, 20), city="Lewes", inspection_type=None),
)


class TestSummary:
    def test_loading(self):
        assert summary_lines(ViewState()) == [LOADING_MESSAGE]

    def test_loaded(self):
        state = ViewState(result=ResultSet(total_count=42, rows=ROWS), loading=False)
        assert summary_lines(state) == [
            "Total Matching Violations: 42",
            "Showing 3 most recent violations",
        ]

    def test_thousands_separator(self):
        state = ViewState(result=ResultSet(total_count=12345, rows=ROWS), loading=False)
        assert summary_lines(state)[0] == "Total Matching Violations: 12,345"

    def test_fetching_keeps_stale_count(self):
        state = ViewState(result=ResultSet(total_count=42, rows=ROWS), loading=False, fetching=True)
        assert summary_lines(state) == ["Total Matching Violations: 42", SEARCHING_MESSAGE]

    def test_error_replaces_view(self):
        state = ViewState(
            result=ResultSet(total_count=42, rows=ROWS),
            loading=False,
            error="Failed to fetch restaurant violations",
        )
        assert summary_lines(state) == ["Failed to fetch restaurant violations"]

    def test_empty(self):
        state = ViewState(result=ResultSet(total_count=0), loading=False)
        assert summary_lines(state) == [
            "Total Matching Violations: 0",
            "Showing 0 most recent violations",
            EMPTY_MESSAGE,
            EMPTY_HINT,
        ]


class TestRows:
    def test_format_date(self):
        assert format_date(date(2024, 3, 5)) == "03/05/2024"
        assert format_date(None) == ""

    def test_table_and_cards_share_keys_and_order(self):
        table = table_rows(ROWS)
        stacked = cards(ROWS)

        assert [r["key"] for r in table] == [c["key"] for c in stacked]
        assert [r["cells"][0] for r in table] == [c["name"] for c in stacked]

    def test_duplicate_records_get_distinct_keys(self):
        keys = [r["key"] for r in table_rows(ROWS)]
        assert keys[0] == "Joe's Diner|2024-03-05|0"
        assert keys[1] == "Joe's Diner|2024-03-05|1"
        assert len(set(keys)) == len(keys)

    def test_table_cells(self):
        cells = table_rows(ROWS)[2]["cells"]
        assert len(cells) == len(TABLE_COLUMNS)
        assert cells == ("Crab Shack", "1 Main St", "Lewes", "2-301.14", "Hands not washed", "", "11/20/2023")

    def test_card_fields(self):
        card = cards(ROWS)[0]
        assert card["address"] == "1 Main St, Dover"
        assert card["inspection_type"] == "Complaint"
        assert card["date"] == "03/05/2024"


class TestRendering:
    def test_render_table(self):
        text = render_table(ROWS)
        lines = text.splitlines()
        assert lines[0].startswith("Restaurant Name")
        assert "Inspection Date" in lines[0]
        assert len(lines) == 2 + len(ROWS)
        assert "Crab Shack" in lines[-1]

    def test_long_cells_clipped(self):
        text = render_table([_record("X", date(2024, 1, 1), violation_description="y" * 100)])
        assert "y" * 100 not in text
        assert "..." in text

    def test_render_cards(self):
        blocks = render_cards(ROWS).split("\n\n")
        assert len(blocks) == 3
        assert blocks[2].splitlines()[0] == "Crab Shack"
        assert blocks[2].splitlines()[-1].strip() == "11/20/2023"

    def test_render_nothing(self):
        assert render_cards([]) == ""
