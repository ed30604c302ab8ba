"""Tests for the command-line browser."""

from unittest.mock import patch

import pytest

from insightbites.cli import _parse_args, browse, main
from insightbites.core.types import County
from insightbites.pipeline.fetcher import RemoteFilterStrategy


class TestParseArgs:
    def test_county_normalised(self):
        assert _parse_args(["--county", "new castle"]).county == County.NEW_CASTLE

    def test_unknown_county_exits(self):
        with pytest.raises(SystemExit):
            _parse_args(["--county", "Atlantis"])

    def test_selections_are_exclusive(self):
        with pytest.raises(SystemExit):
            _parse_args(["--city", "Dover", "--zip", "19901"])

    def test_zip_dest(self):
        args = _parse_args(["--zip", "19901", "--cards"])
        assert args.zip_code == "19901"
        assert args.cards is True


class TestBrowse:
    async def test_city_session(self, fake_soda, make_row):
        soda = fake_soda([make_row("A", "2024-01-01")], count=9)
        with patch("insightbites.cli.build_strategy", return_value=RemoteFilterStrategy(soda.client())):
            state = await browse(_parse_args(["--city", "Dover"]))

        assert state.result.total_count == 9
        assert soda.where_clauses()[-1].endswith("restcity='Dover'")

    async def test_search_session_settles(self, fake_soda):
        soda = fake_soda([])
        with patch("insightbites.cli.build_strategy", return_value=RemoteFilterStrategy(soda.client())):
            await browse(_parse_args(["--search", "pizza"]))

        assert soda.where_clauses()[-1].endswith("upper(restname) like upper('%pizza%')")


class TestMain:
    def test_prints_summary_and_table(self, fake_soda, make_row, capsys):
        soda = fake_soda([make_row("Crab Shack", "2024-01-01")], count=1)
        with (
            patch("insightbites.cli.build_strategy", return_value=RemoteFilterStrategy(soda.client())),
            patch("insightbites.cli.init_tracing"),
            patch("insightbites.cli.setup_logging"),
        ):
            main(["--city", "Dover"])

        out = capsys.readouterr().out
        assert "Total Matching Violations: 1" in out
        assert "Showing 1 most recent violations" in out
        assert "Crab Shack" in out

    def test_error_exits_nonzero(self, fake_soda):
        soda = fake_soda(status=500)
        with (
            patch("insightbites.cli.build_strategy", return_value=RemoteFilterStrategy(soda.client())),
            patch("insightbites.cli.init_tracing"),
            patch("insightbites.cli.setup_logging"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main([])
        assert exc_info.value.code == 1
