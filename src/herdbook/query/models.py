"""Pydantic models describing one record query and its page of results."""

from typing import AbstractSet, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

DESCENDING_VALUES = ("desc", "descending")


def is_empty_filter_value(value: Any) -> bool:
    """A filter value of None or "" means "no filter"."""
    return value is None or value == ""


class RangeFilter(BaseModel):
    """Inclusive bounds on a numeric or date-like field."""

    model_config = ConfigDict(frozen=True)

    minimum: Any = Field(default=None, description="Lower bound (inclusive), None for open")
    maximum: Any = Field(default=None, description="Upper bound (inclusive), None for open")

    def is_active(self) -> bool:
        return self.minimum is not None or self.maximum is not None


class QueryDescriptor(BaseModel):
    """Immutable description of one filter/sort/page request.

    A new descriptor is built on every interaction (search keystroke, filter
    change, sort toggle, page click); use with_changes() to derive one from
    another. Values are accepted as given: out-of-range pages and unknown
    sort fields are resolved by the engine, never rejected here.
    """

    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    equality_filters: Dict[str, Any] = Field(default_factory=dict)
    range_filters: Dict[str, RangeFilter] = Field(default_factory=dict)
    sort_field: Optional[str] = None
    sort_direction: str = "asc"
    page: int = 1
    page_size: int = 10

    @property
    def descending(self) -> bool:
        return (self.sort_direction or "").lower() in DESCENDING_VALUES

    def with_changes(self, **updates: Any) -> "QueryDescriptor":
        """Shallow copy with the given fields replaced (validated)."""
        data = self.model_dump()
        data.update(updates)
        return QueryDescriptor.model_validate(data)

    def active_filters(self, match_all_values: AbstractSet[str] = frozenset()) -> Dict[str, Any]:
        """
        Criteria that actually narrow the result (paging and sorting excluded).

        Pass the record type's wildcard values (FieldConfig.match_all_values)
        so that dropdown values such as "ALL" are not counted.
        """
        active: Dict[str, Any] = {}
        if self.search_term:
            active["search_term"] = self.search_term
        for field, value in self.equality_filters.items():
            if is_empty_filter_value(value) or (isinstance(value, str) and value in match_all_values):
                continue
            active[field] = value
        for field, bounds in self.range_filters.items():
            if bounds.is_active():
                active[field] = bounds
        return active

    @property
    def active_filter_count(self) -> int:
        """Count before any registry wildcards are applied."""
        return len(self.active_filters())


class QueryResult(BaseModel):
    """One page of matched records plus the totals a pager needs."""

    items: List[Dict[str, Any]] = Field(default_factory=list, description="Records on this page, in order")
    total_matched: int = Field(..., description="Records matching search and filters, independent of paging")
    total_pages: int = Field(..., description="Number of pages (at least 1)")
    page: int = Field(..., description="Effective page number after clamping")
    page_size: int = Field(..., description="Effective page size after clamping")

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page > 1
