"""Fixed-record employee database file."""

__version__ = "1.0.0"
