"""Observability — structured logging and MLflow tracing setup."""

from insightbites.observability.logging import correlation_id, get_correlation_id, setup_logging
from insightbites.observability.tracing import init_tracing

__all__ = ["correlation_id", "get_correlation_id", "init_tracing", "setup_logging"]
