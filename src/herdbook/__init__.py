"""Livestock records toolkit: herd records, queries, statistics and export."""

__version__ = "0.1.0"
