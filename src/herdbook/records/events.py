"""Field registry for herd calendar events."""

from datetime import date
from typing import Any, Mapping, Optional

from ..query.fields import MISSING, FieldConfig, compare_by_rank, compare_dates
from ..utils.time import days_between, parse_date, today_utc

EVENT_TYPES = ("vaccination", "health", "breeding", "feeding", "transport", "purchase", "sale")
EVENT_STATUSES = ("scheduled", "in_progress", "completed", "cancelled", "overdue")

PRIORITY_LEVELS = {
    "low": 1,
    "medium": 2,
    "high": 3,
    "critical": 4,
    "emergency": 5,
}
HIGH_PRIORITIES = frozenset({"high", "critical", "emergency"})


def priority_level(record: Mapping[str, Any]) -> Any:
    level = PRIORITY_LEVELS.get(record.get("priority"))
    return MISSING if level is None else level


def _days_until(today: date):
    def _derive(record: Mapping[str, Any]) -> Any:
        scheduled: Optional[date] = parse_date(record.get("scheduled_date"))
        if scheduled is None:
            return MISSING
        return days_between(today, scheduled)

    return _derive


def event_field_config(today: Optional[date] = None) -> FieldConfig:
    reference = today or today_utc()
    return FieldConfig(
        id_field="id",
        searchable_fields=frozenset({"title", "description", "bovine_name", "bovine_tag", "tags"}),
        sortable_fields={
            "scheduled_date": compare_dates,
            "created_at": compare_dates,
            "completed_at": compare_dates,
            "priority": compare_by_rank(tuple(PRIORITY_LEVELS)),
            "status": compare_by_rank(EVENT_STATUSES),
        },
        derived_fields={
            "priority_level": priority_level,
            "is_high_priority": lambda record: record.get("priority") in HIGH_PRIORITIES,
            "days_until": _days_until(reference),
        },
        match_all_values=frozenset({"all", "ALL"}),
    )
