"""Record query engine: filter, sort and paginate an in-memory collection."""

import math
from functools import cmp_to_key
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..utils.logging import get_logger
from ..utils.time import to_epoch_seconds
from .fields import MISSING, FieldConfig, Record, is_missing
from .models import QueryDescriptor, QueryResult, RangeFilter, is_empty_filter_value

logger = get_logger(__name__)


def _match_text(value: Any, term: str) -> bool:
    """Case-insensitive containment; lists of strings match on any element."""
    if isinstance(value, str):
        return term in value.lower()
    if isinstance(value, (list, tuple)):
        return any(isinstance(item, str) and term in item.lower() for item in value)
    return False


def _matches_search(record: Record, term: str, config: FieldConfig) -> bool:
    if not term:
        return True
    lowered = term.lower()
    for field in config.searchable_fields:
        value = config.resolve(record, field)
        if value is MISSING:
            continue
        if _match_text(value, lowered):
            return True
    return False


def _equals(value: Any, expected: Any) -> bool:
    """Exact match; a boolean never equals a number."""
    if isinstance(value, bool) != isinstance(expected, bool):
        return False
    return value == expected


def _matches_equality(record: Record, filters: dict, config: FieldConfig) -> bool:
    for field, expected in filters.items():
        if is_empty_filter_value(expected) or config.is_match_all(expected):
            continue
        value = config.resolve(record, field)
        if value is MISSING or not _equals(value, expected):
            return False
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare_to_bound(value: Any, bound: Any) -> Optional[int]:
    """
    Compare a field value to a range bound.

    Returns None when the two cannot be ordered against each other
    (e.g. a number against free text).
    """
    if _is_number(value) and _is_number(bound):
        return (value > bound) - (value < bound)
    value_epoch = to_epoch_seconds(value)
    bound_epoch = to_epoch_seconds(bound)
    if value_epoch is not None and bound_epoch is not None:
        return (value_epoch > bound_epoch) - (value_epoch < bound_epoch)
    if isinstance(value, str) and isinstance(bound, str):
        return (value > bound) - (value < bound)
    return None


def _matches_range(value: Any, bounds: RangeFilter) -> bool:
    if is_missing(value):
        return False
    if bounds.minimum is not None:
        order = _compare_to_bound(value, bounds.minimum)
        if order is None or order < 0:
            return False
    if bounds.maximum is not None:
        order = _compare_to_bound(value, bounds.maximum)
        if order is None or order > 0:
            return False
    return True


def _matches_ranges(record: Record, ranges: dict, config: FieldConfig) -> bool:
    for field, bounds in ranges.items():
        if not bounds.is_active():
            continue
        if not _matches_range(config.resolve(record, field), bounds):
            return False
    return True


def filter_records(
    collection: Iterable[Record],
    descriptor: QueryDescriptor,
    config: FieldConfig,
) -> List[Record]:
    """
    Keep records matching the search term, every equality filter and every range filter.

    Absent or non-string fields never match the search term and never satisfy
    an active filter; they are not errors.
    """
    return [
        record
        for record in collection
        if _matches_search(record, descriptor.search_term, config)
        and _matches_equality(record, descriptor.equality_filters, config)
        and _matches_ranges(record, descriptor.range_filters, config)
    ]


def sort_records(
    records: Sequence[Record],
    sort_field: Optional[str],
    descending: bool,
    config: FieldConfig,
) -> List[Record]:
    """
    Stable sort by one field (stored or derived).

    Missing values sort last in both directions. Without a sort field the
    input order is kept.
    """
    if not sort_field:
        return list(records)

    comparator = config.comparator_for(sort_field)
    keyed: List[Tuple[Any, Record]] = [(config.resolve(record, sort_field), record) for record in records]

    def _compare_entries(left: Tuple[Any, Record], right: Tuple[Any, Record]) -> int:
        left_missing = is_missing(left[0])
        right_missing = is_missing(right[0])
        if left_missing and right_missing:
            return 0
        if left_missing:
            return 1
        if right_missing:
            return -1
        result = comparator(left[0], right[0])
        return -result if descending else result

    return [record for _, record in sorted(keyed, key=cmp_to_key(_compare_entries))]


def paginate(records: Sequence[Record], page: int, page_size: int) -> QueryResult:
    """Slice one 1-indexed page; pages past the end are empty, never errors."""
    size = max(1, page_size)
    current = max(1, page)
    total_matched = len(records)
    total_pages = max(1, math.ceil(total_matched / size))
    start = (current - 1) * size
    items = [dict(record) for record in records[start:start + size]]
    return QueryResult(
        items=items,
        total_matched=total_matched,
        total_pages=total_pages,
        page=current,
        page_size=size,
    )


def query(
    collection: Iterable[Record],
    descriptor: QueryDescriptor,
    config: FieldConfig,
) -> QueryResult:
    """
    Run a descriptor against a collection: filter, then sort, then page.

    The collection and its records are read only. Unknown sort fields fall
    back to default comparison; exceptions raised by derivations or
    comparators from the field registry propagate unchanged.

    Args:
        collection: Records of one type (mappings of field name to value)
        descriptor: Search term, filters, sort and page request
        config: Field registry for the record type

    Returns:
        QueryResult with this page's items and totals for a pager
    """
    matched = filter_records(collection, descriptor, config)
    ordered = sort_records(matched, descriptor.sort_field, descriptor.descending, config)
    result = paginate(ordered, descriptor.page, descriptor.page_size)
    logger.debug(
        "query matched=%s pages=%s page=%s filters=%s",
        result.total_matched,
        result.total_pages,
        result.page,
        len(descriptor.active_filters(config.match_all_values)),
    )
    return result
