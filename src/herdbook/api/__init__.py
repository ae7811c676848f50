"""API layer: canonical query surface for the CLI and export.

Key rules:

1. No SQLAlchemy imports beyond the Session type - only call repo functions
2. Filtering, sorting and paging go through the query engine, never ad hoc
3. Return Pydantic models or composition wrappers only
"""
