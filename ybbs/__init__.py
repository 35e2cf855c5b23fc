"""Storage, records and content formatting for a small bulletin board."""

__version__ = "0.1.0"