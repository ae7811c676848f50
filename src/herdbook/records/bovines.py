"""Field registry, derived fields and filter presets for bovine records."""

from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from ..query.fields import MISSING, FieldConfig, compare_by_rank, compare_dates
from ..query.models import QueryDescriptor, RangeFilter
from ..utils.calculations import calculate_age_in_months, calculate_age_in_years, calculate_distance
from ..utils.time import days_between, parse_date, today_utc

BOVINE_TYPES = ("dairy_cow", "beef_cow", "bull", "calf", "heifer", "steer")
GENDERS = ("male", "female")
HEALTH_STATUSES = ("healthy", "sick", "quarantine", "recovering", "dead")
VACCINATION_STATUSES = ("up-to-date", "due-soon", "overdue", "never-vaccinated")

DEFAULT_DUE_SOON_DAYS = 30
VACCINATION_INTERVAL_DAYS = 90


def _vaccinations(record: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    vaccinations = record.get("vaccinations") or []
    return [v for v in vaccinations if isinstance(v, Mapping)]


def vaccination_status(record: Mapping[str, Any], today: date, due_soon_days: int = DEFAULT_DUE_SOON_DAYS) -> str:
    """
    Vaccination urgency of one animal relative to today.

    overdue beats due-soon beats up-to-date; an animal whose doses carry no
    next due date is up-to-date.
    """
    vaccinations = _vaccinations(record)
    if not vaccinations:
        return "never-vaccinated"
    days_until_due = []
    for vaccination in vaccinations:
        due = parse_date(vaccination.get("next_due_date"))
        if due is not None:
            days_until_due.append((due - today).days)
    if any(days < 0 for days in days_until_due):
        return "overdue"
    if any(days <= due_soon_days for days in days_until_due):
        return "due-soon"
    return "up-to-date"


def next_due_date(record: Mapping[str, Any], today: date) -> Optional[date]:
    """Earliest due date that has not passed, None when nothing is scheduled."""
    upcoming = [
        due
        for due in (parse_date(v.get("next_due_date")) for v in _vaccinations(record))
        if due is not None and due >= today
    ]
    return min(upcoming) if upcoming else None


def last_vaccination_date(record: Mapping[str, Any]) -> Optional[date]:
    applied = [
        day
        for day in (parse_date(v.get("application_date")) for v in _vaccinations(record))
        if day is not None
    ]
    return max(applied) if applied else None


def _age_years(today: date):
    def _derive(record: Mapping[str, Any]) -> Any:
        birth = parse_date(record.get("birth_date"))
        if birth is None:
            return MISSING
        return calculate_age_in_years(birth, today)

    return _derive


def _age_months(today: date):
    def _derive(record: Mapping[str, Any]) -> Any:
        birth = parse_date(record.get("birth_date"))
        if birth is None:
            return MISSING
        return calculate_age_in_months(birth, today)

    return _derive


def _days_since_last_vaccination(today: date):
    def _derive(record: Mapping[str, Any]) -> Any:
        last = last_vaccination_date(record)
        if last is None:
            return MISSING
        return days_between(last, today)

    return _derive


def needs_vaccination(record: Mapping[str, Any], today: date, interval_days: int = VACCINATION_INTERVAL_DAYS) -> bool:
    """True when the animal has no doses or its last dose is more than interval_days old."""
    last = last_vaccination_date(record)
    if last is None:
        return True
    return days_between(last, today) > interval_days


def _distance_from(latitude: float, longitude: float):
    def _derive(record: Mapping[str, Any]) -> Any:
        if record.get("latitude") is None or record.get("longitude") is None:
            return MISSING
        return calculate_distance(latitude, longitude, record["latitude"], record["longitude"])

    return _derive


def bovine_field_config(
    today: Optional[date] = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    near: Optional[Tuple[float, float]] = None,
) -> FieldConfig:
    """
    Registry for bovine records.

    Derived fields are computed against `today` so two queries with the same
    reference date give the same answer. When `near` is a (latitude, longitude)
    point, `distance_m` gives each animal's distance from it in metres, so a
    range filter on it selects animals within a radius.
    """
    reference = today or today_utc()
    config = FieldConfig(
        id_field="id",
        searchable_fields=frozenset({"ear_tag", "name", "breed"}),
        sortable_fields={
            "birth_date": compare_dates,
            "created_at": compare_dates,
            "next_due_date": compare_dates,
            "last_vaccination_date": compare_dates,
            "health_status": compare_by_rank(HEALTH_STATUSES),
            "vaccination_status": compare_by_rank(("overdue", "due-soon", "never-vaccinated", "up-to-date")),
        },
        derived_fields={
            "age_years": _age_years(reference),
            "age_months": _age_months(reference),
            "vaccination_status": lambda record: vaccination_status(record, reference, due_soon_days),
            "next_due_date": lambda record: next_due_date(record, reference),
            "last_vaccination_date": last_vaccination_date,
            "days_since_last_vaccination": _days_since_last_vaccination(reference),
            "needs_vaccination": lambda record: needs_vaccination(record, reference),
        },
        match_all_values=frozenset({"ALL", "all"}),
    )
    if near is None:
        return config
    return config.extend(derived_fields={"distance_m": _distance_from(*near)})


class FilterPreset(BaseModel):
    """Named set of filters for a common herd question."""

    id: str
    name: str
    description: str
    equality_filters: Dict[str, Any] = Field(default_factory=dict)
    range_filters: Dict[str, RangeFilter] = Field(default_factory=dict)


BOVINE_PRESETS: Dict[str, FilterPreset] = {
    preset.id: preset
    for preset in (
        FilterPreset(
            id="healthy-adults",
            name="Healthy adults",
            description="Adult animals in good health",
            equality_filters={"health_status": "healthy"},
            range_filters={"age_years": RangeFilter(minimum=2, maximum=15)},
        ),
        FilterPreset(
            id="need-vaccination",
            name="Need vaccination",
            description="Healthy animals never vaccinated or not vaccinated in the last 90 days",
            equality_filters={"health_status": "healthy", "needs_vaccination": True},
        ),
        FilterPreset(
            id="sick-or-recovering",
            name="Sick",
            description="Animals that need medical attention",
            equality_filters={"health_status": "sick"},
        ),
        FilterPreset(
            id="young-calves",
            name="Young calves",
            description="Calves under six months",
            equality_filters={"type": "calf"},
            range_filters={"age_months": RangeFilter(minimum=0, maximum=6)},
        ),
        FilterPreset(
            id="quarantine",
            name="Quarantine",
            description="Animals in quarantine",
            equality_filters={"health_status": "quarantine"},
        ),
        FilterPreset(
            id="breeding-females",
            name="Breeding females",
            description="Healthy cows of reproductive age",
            equality_filters={"gender": "female", "health_status": "healthy"},
            range_filters={"age_years": RangeFilter(minimum=2, maximum=12)},
        ),
    )
}


def apply_preset(descriptor: QueryDescriptor, preset_id: str) -> QueryDescriptor:
    """
    Merge a preset's filters into a descriptor, returning to page 1.

    Raises:
        KeyError: If preset_id is not a known preset
    """
    preset = BOVINE_PRESETS[preset_id]
    return descriptor.with_changes(
        equality_filters={**descriptor.equality_filters, **preset.equality_filters},
        range_filters={**descriptor.range_filters, **preset.range_filters},
        page=1,
    )
