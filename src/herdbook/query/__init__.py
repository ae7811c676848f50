"""Record query engine: pure filter/sort/paginate over in-memory records."""

from .engine import filter_records, paginate, query, sort_records
from .fields import MISSING, FieldConfig, compare_by_rank, compare_dates, default_compare
from .models import QueryDescriptor, QueryResult, RangeFilter

__all__ = [
    "MISSING",
    "FieldConfig",
    "QueryDescriptor",
    "QueryResult",
    "RangeFilter",
    "compare_by_rank",
    "compare_dates",
    "default_compare",
    "filter_records",
    "paginate",
    "query",
    "sort_records",
]
