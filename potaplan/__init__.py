"""Parks on the Air activation planner: data sync and caching engine."""

__version__ = "1.0.0"
