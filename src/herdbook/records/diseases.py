"""Field registry for disease cases."""

from datetime import date
from typing import Any, Mapping, Optional

from ..query.fields import MISSING, FieldConfig, compare_by_rank, compare_dates
from ..utils.time import days_between, parse_date, today_utc

DISEASE_TYPES = ("viral", "bacterial", "parasitic", "metabolic", "genetic", "injury")
CASE_SEVERITIES = ("low", "medium", "high", "critical")
CASE_STATUSES = ("active", "treating", "recovered", "chronic", "deceased")
ACTIVE_STATUSES = frozenset({"active", "treating"})


def severity_level(record: Mapping[str, Any]) -> Any:
    severity = record.get("severity")
    if severity not in CASE_SEVERITIES:
        return MISSING
    return CASE_SEVERITIES.index(severity) + 1


def _days_sick(today: date):
    # Open cases count up to today.
    def _derive(record: Mapping[str, Any]) -> Any:
        diagnosed: Optional[date] = parse_date(record.get("diagnosis_date"))
        if diagnosed is None:
            return MISSING
        ended = parse_date(record.get("recovery_date")) or today
        return days_between(diagnosed, ended)

    return _derive


def disease_field_config(today: Optional[date] = None) -> FieldConfig:
    reference = today or today_utc()
    return FieldConfig(
        id_field="id",
        searchable_fields=frozenset({"animal_name", "disease_name", "animal_tag"}),
        sortable_fields={
            "diagnosis_date": compare_dates,
            "recovery_date": compare_dates,
            "follow_up_date": compare_dates,
            "severity": compare_by_rank(CASE_SEVERITIES),
            "status": compare_by_rank(CASE_STATUSES),
        },
        derived_fields={
            "severity_level": severity_level,
            "days_sick": _days_sick(reference),
            "is_active": lambda record: record.get("status") in ACTIVE_STATUSES,
        },
        match_all_values=frozenset({"all", "ALL"}),
    )
