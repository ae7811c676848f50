"""Field registry for a record type: what can be searched, sorted and derived."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Sequence

from ..utils.time import to_epoch_seconds

Record = Mapping[str, Any]
Comparator = Callable[[Any, Any], int]
Derivation = Callable[[Record], Any]


class _Missing:
    """Sentinel for a field a record does not carry."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING or value is None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sign(value: float) -> int:
    if value < 0:
        return -1
    if value > 0:
        return 1
    return 0


def default_compare(left: Any, right: Any) -> int:
    """Numeric comparison when both values are numbers, else compare str() forms."""
    if _is_number(left) and _is_number(right):
        return _sign(left - right)
    left_text = str(left)
    right_text = str(right)
    if left_text < right_text:
        return -1
    if left_text > right_text:
        return 1
    return 0


def compare_dates(left: Any, right: Any) -> int:
    """Compare date-like values as epoch time; unparseable values order after dates."""
    left_epoch = to_epoch_seconds(left)
    right_epoch = to_epoch_seconds(right)
    if left_epoch is None and right_epoch is None:
        return default_compare(left, right)
    if left_epoch is None:
        return 1
    if right_epoch is None:
        return -1
    return _sign(left_epoch - right_epoch)


def compare_by_rank(order: Sequence[str]) -> Comparator:
    """
    Build a comparator ranking enumeration values by their position in order.

    Values not listed rank after every listed value and compare by text among
    themselves.
    """
    ranks = {value: index for index, value in enumerate(order)}

    def _compare(left: Any, right: Any) -> int:
        left_rank = ranks.get(left, len(ranks))
        right_rank = ranks.get(right, len(ranks))
        if left_rank != right_rank:
            return _sign(left_rank - right_rank)
        if left_rank == len(ranks):
            return default_compare(left, right)
        return 0

    return _compare


@dataclass(frozen=True)
class FieldConfig:
    """
    Field registry for one record type, resolved once and reused per query.

    Attributes:
        id_field: Unique identifier field of the record type
        searchable_fields: Fields matched by the free-text search term
        sortable_fields: Field name -> comparator over two present values
        derived_fields: Virtual field name -> function computing it from a record
        match_all_values: Filter values meaning "no filter" (e.g. "ALL" from a dropdown)
    """

    id_field: str = "id"
    searchable_fields: FrozenSet[str] = frozenset()
    sortable_fields: Mapping[str, Comparator] = field(default_factory=dict)
    derived_fields: Mapping[str, Derivation] = field(default_factory=dict)
    match_all_values: FrozenSet[str] = frozenset()

    def resolve(self, record: Record, name: str) -> Any:
        """Value of a stored or derived field, MISSING when the record has neither."""
        derivation = self.derived_fields.get(name)
        if derivation is not None:
            return derivation(record)
        return record.get(name, MISSING)

    def comparator_for(self, name: Optional[str]) -> Comparator:
        if name is None:
            return default_compare
        return self.sortable_fields.get(name, default_compare)

    def is_match_all(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.match_all_values

    def known_fields(self) -> FrozenSet[str]:
        """Every field name declared by this registry."""
        return frozenset(self.searchable_fields) | frozenset(self.sortable_fields) | frozenset(self.derived_fields) | {self.id_field}

    def extend(
        self,
        *,
        derived_fields: Optional[Dict[str, Derivation]] = None,
        sortable_fields: Optional[Dict[str, Comparator]] = None,
    ) -> "FieldConfig":
        """Copy of this registry with extra derived fields or comparators."""
        return FieldConfig(
            id_field=self.id_field,
            searchable_fields=self.searchable_fields,
            sortable_fields={**self.sortable_fields, **(sortable_fields or {})},
            derived_fields={**self.derived_fields, **(derived_fields or {})},
            match_all_values=self.match_all_values,
        )
