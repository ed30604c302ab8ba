"""InsightBites — Delaware restaurant inspection violation viewer."""

__version__ = "1.0.0"
