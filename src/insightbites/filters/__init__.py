"""Filter selection and query building."""

from insightbites.filters.query import ViolationQuery, build_query
from insightbites.filters.state import FilterState

__all__ = ["FilterState", "ViolationQuery", "build_query"]
