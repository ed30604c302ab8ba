"""InsightBites CLI — browse Delaware restaurant violations from the terminal."""

import argparse
import asyncio
import sys

from insightbites.config import Settings, settings
from insightbites.core.counties import parse_county
from insightbites.core.types import County, FilterMode, ViewState
from insightbites.observability import init_tracing, setup_logging
from insightbites.pipeline.fetcher import ViolationFetcher, build_strategy
from insightbites.pipeline.viewer import ViolationViewer
from insightbites.views import render_cards, render_table, summary_lines


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="insightbites",
        description="Most recent Delaware restaurant inspection violations.",
    )
    selection = parser.add_mutually_exclusive_group()
    selection.add_argument("--county", help="Sussex, Kent or New Castle")
    selection.add_argument("--city", help="Exact city name, e.g. Dover")
    selection.add_argument("--zip", dest="zip_code", help="Five-digit zip code")
    selection.add_argument("--search", help="Restaurant name (3+ characters)")
    parser.add_argument("--strategy", choices=["remote", "local"], help="Override FILTER_STRATEGY")
    parser.add_argument("--cards", action="store_true", help="Stacked cards instead of a table")

    args = parser.parse_args(argv)
    if args.county:
        try:
            args.county = parse_county(args.county)
        except ValueError as e:
            parser.error(str(e))
    return args


async def browse(args: argparse.Namespace, config: Settings = settings) -> ViewState:
    """Run one viewer session for the selection given on the command line."""
    viewer = ViolationViewer(ViolationFetcher(build_strategy(config)))
    await viewer.start()
    try:
        if args.county:
            await viewer.set_mode(FilterMode.COUNTY)
            await viewer.select_county(County(args.county))
        elif args.city:
            await viewer.set_mode(FilterMode.CITY)
            await viewer.select_city(args.city)
        elif args.zip_code:
            await viewer.set_mode(FilterMode.ZIPCODE)
            await viewer.set_zip_code(args.zip_code)
        elif args.search:
            await viewer.set_mode(FilterMode.RESTAURANT)
            viewer.type_search(args.search)
            await viewer.settle()
    finally:
        await viewer.close()
    return viewer.state


def main(argv: list[str] | None = None) -> None:
    """Print violations: insightbites [--county | --city | --zip | --search] [--cards]"""
    args = _parse_args(argv)
    setup_logging(json_format=False, level=settings.log_level, secrets=[settings.app_token])
    init_tracing(settings)

    config = settings
    if args.strategy:
        config = settings.model_copy(update={"filter_strategy": args.strategy})

    state = asyncio.run(browse(args, config))

    print("\nInsightBites — Delaware Restaurant Violations")
    print(f"{'=' * 50}")
    for line in summary_lines(state):
        print(line)
    if state.error:
        sys.exit(1)

    if state.result.rows:
        print()
        print(render_cards(state.result.rows) if args.cards else render_table(state.result.rows))


if __name__ == "__main__":
    main()
