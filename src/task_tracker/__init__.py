"""Command-line task tracker persisting tasks to a local JSON file."""

__version__ = "0.1.0"
