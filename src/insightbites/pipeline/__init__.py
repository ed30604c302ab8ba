"""Fetch lifecycle: strategies, fetcher, debouncer and viewer session."""

from insightbites.pipeline.debounce import DEBOUNCE_SECONDS, Debouncer
from insightbites.pipeline.fetcher import (
    FETCH_ERROR_MESSAGE,
    LocalFilterStrategy,
    RemoteFilterStrategy,
    ViolationFetcher,
    build_strategy,
)
from insightbites.pipeline.viewer import ViolationViewer

__all__ = [
    "DEBOUNCE_SECONDS",
    "FETCH_ERROR_MESSAGE",
    "Debouncer",
    "LocalFilterStrategy",
    "RemoteFilterStrategy",
    "ViolationFetcher",
    "ViolationViewer",
    "build_strategy",
]
