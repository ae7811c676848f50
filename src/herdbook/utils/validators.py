"""Field validators for herd records."""

import re
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, Optional

from pydantic import BaseModel

from ..records.bovines import BOVINE_TYPES, GENDERS, HEALTH_STATUSES
from ..records.diseases import CASE_SEVERITIES, CASE_STATUSES, DISEASE_TYPES
from ..records.events import EVENT_STATUSES, EVENT_TYPES, PRIORITY_LEVELS
from .time import parse_date

EAR_TAG_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
ANIMAL_NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|\s)+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DOSE_PATTERN = re.compile(r"^\d+(\.\d+)?\s*(ml|mL|cc|mg|g|dosis|dose)$")

MIN_WEIGHT_KG = 10
MAX_WEIGHT_KG = 2000
MAX_ANIMAL_AGE_YEARS = 30

ValidationErrors = Dict[str, str]


class ValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None


def _ok() -> ValidationResult:
    return ValidationResult(is_valid=True)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=message)


def validate_ear_tag(ear_tag: Optional[str]) -> ValidationResult:
    if not ear_tag:
        return _fail("Ear tag is required")
    if len(ear_tag) < 3:
        return _fail("Ear tag must be at least 3 characters")
    if len(ear_tag) > 20:
        return _fail("Ear tag cannot be longer than 20 characters")
    if not EAR_TAG_PATTERN.match(ear_tag):
        return _fail("Ear tag may only contain letters and digits")
    return _ok()


def validate_email(email: Optional[str]) -> ValidationResult:
    if not email:
        return _fail("Email is required")
    if not EMAIL_PATTERN.match(email):
        return _fail("Invalid email format")
    return _ok()


def validate_weight(weight: Optional[float]) -> ValidationResult:
    if weight is None:
        return _fail("Weight is required")
    if weight <= 0:
        return _fail("Weight must be greater than 0")
    if weight < MIN_WEIGHT_KG:
        return _fail(f"Minimum weight is {MIN_WEIGHT_KG} kg")
    if weight > MAX_WEIGHT_KG:
        return _fail(f"Maximum weight is {MAX_WEIGHT_KG} kg")
    return _ok()


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def validate_birth_date(birth_date: Optional[date], today: date) -> ValidationResult:
    if birth_date is None:
        return _fail("Birth date is required")
    if birth_date > today:
        return _fail("Birth date cannot be in the future")
    if birth_date < _years_before(today, MAX_ANIMAL_AGE_YEARS):
        return _fail(f"Birth date cannot be more than {MAX_ANIMAL_AGE_YEARS} years ago")
    return _ok()


def validate_vaccination_date(vaccination_date: Optional[date], today: date) -> ValidationResult:
    if vaccination_date is None:
        return _fail("Vaccination date is required")
    if vaccination_date > today + timedelta(days=30):
        return _fail("Vaccination date cannot be more than 30 days in the future")
    if vaccination_date < _years_before(today, 10):
        return _fail("Vaccination date cannot be more than 10 years ago")
    return _ok()


def validate_coordinates(latitude: Optional[float], longitude: Optional[float]) -> ValidationResult:
    if latitude is None:
        return _fail("Latitude is required")
    if longitude is None:
        return _fail("Longitude is required")
    if latitude < -90 or latitude > 90:
        return _fail("Latitude must be between -90 and 90 degrees")
    if longitude < -180 or longitude > 180:
        return _fail("Longitude must be between -180 and 180 degrees")
    return _ok()


def validate_animal_name(name: Optional[str]) -> ValidationResult:
    """Names are optional; when present they are letters and spaces only."""
    if not name:
        return _ok()
    if len(name) > 100:
        return _fail("Name cannot be longer than 100 characters")
    if not ANIMAL_NAME_PATTERN.match(name):
        return _fail("Name may only contain letters and spaces")
    return _ok()


def validate_choice(value: Optional[str], choices: Iterable[str], label: str) -> ValidationResult:
    if not value:
        return _fail(f"{label} is required")
    if value not in choices:
        return _fail(f"Invalid {label.lower()}: {value}")
    return _ok()


def validate_bovine_type(value: Optional[str]) -> ValidationResult:
    return validate_choice(value, BOVINE_TYPES, "Bovine type")


def validate_gender(value: Optional[str]) -> ValidationResult:
    return validate_choice(value, GENDERS, "Gender")


def validate_health_status(value: Optional[str]) -> ValidationResult:
    return validate_choice(value, HEALTH_STATUSES, "Health status")


def validate_case_severity(value: Optional[str]) -> ValidationResult:
    return validate_choice(value, CASE_SEVERITIES, "Severity")


def validate_vaccine_dose(dose: Optional[str]) -> ValidationResult:
    if not dose:
        return _fail("Dose is required")
    if not DOSE_PATTERN.match(dose.strip()):
        return _fail("Dose must be an amount with a unit (e.g. 2 ml)")
    return _ok()


def validate_date_range(start: Optional[date], end: Optional[date]) -> ValidationResult:
    if start is None:
        return _fail("Start date is required")
    if end is None:
        return _fail("End date is required")
    if start > end:
        return _fail("Start date must be before end date")
    return _ok()


def validate_required_text(text: Optional[str], field_name: str, max_length: Optional[int] = None) -> ValidationResult:
    if not text or not text.strip():
        return _fail(f"{field_name} is required")
    if max_length and len(text) > max_length:
        return _fail(f"{field_name} cannot be longer than {max_length} characters")
    return _ok()


def validate_positive_number(value: Optional[float], field_name: str) -> ValidationResult:
    if value is None:
        return _fail(f"{field_name} is required")
    if value <= 0:
        return _fail(f"{field_name} must be greater than 0")
    return _ok()


def validate_number_range(value: Optional[float], minimum: float, maximum: float, field_name: str) -> ValidationResult:
    if value is None:
        return _fail(f"{field_name} is required")
    if value < minimum or value > maximum:
        return _fail(f"{field_name} must be between {minimum} and {maximum}")
    return _ok()


def validate_fields(fields: Dict[str, Callable[[], ValidationResult]]) -> ValidationErrors:
    """Run validators lazily, returning field -> message for the failures."""
    errors: ValidationErrors = {}
    for field_name, validator in fields.items():
        result = validator()
        if not result.is_valid:
            errors[field_name] = result.error or "Validation error"
    return errors


def has_validation_errors(errors: ValidationErrors) -> bool:
    return len(errors) > 0


def get_first_validation_error(errors: ValidationErrors) -> Optional[str]:
    for message in errors.values():
        return message
    return None


def validate_bovine(record: Dict[str, Any], today: date) -> ValidationErrors:
    """Validate the fields of one bovine record before it is stored."""
    return validate_fields(
        {
            "ear_tag": lambda: validate_ear_tag(record.get("ear_tag")),
            "name": lambda: validate_animal_name(record.get("name")),
            "type": lambda: validate_bovine_type(record.get("type")),
            "gender": lambda: validate_gender(record.get("gender")),
            "health_status": lambda: validate_health_status(record.get("health_status")),
            "weight": lambda: validate_weight(record.get("weight")),
            "birth_date": lambda: validate_birth_date(parse_date(record.get("birth_date")), today),
            "location": lambda: (
                validate_coordinates(record.get("latitude"), record.get("longitude"))
                if record.get("latitude") is not None or record.get("longitude") is not None
                else _ok()
            ),
        }
    )


def validate_diagnosis_date(diagnosis_date: Optional[date], today: date) -> ValidationResult:
    if diagnosis_date is None:
        return _fail("Diagnosis date is required")
    if diagnosis_date > today:
        return _fail("Diagnosis date cannot be in the future")
    return _ok()


def validate_disease_case(record: Dict[str, Any], today: date) -> ValidationErrors:
    return validate_fields(
        {
            "animal_tag": lambda: validate_ear_tag(record.get("animal_tag")),
            "disease_name": lambda: validate_required_text(record.get("disease_name"), "Disease name", 100),
            "disease_type": lambda: validate_choice(record.get("disease_type"), DISEASE_TYPES, "Disease type"),
            "severity": lambda: validate_case_severity(record.get("severity")),
            "status": lambda: validate_choice(record.get("status"), CASE_STATUSES, "Status"),
            "diagnosis_date": lambda: validate_diagnosis_date(parse_date(record.get("diagnosis_date")), today),
        }
    )


def validate_event(record: Dict[str, Any]) -> ValidationErrors:
    return validate_fields(
        {
            "title": lambda: validate_required_text(record.get("title"), "Title", 200),
            "event_type": lambda: validate_choice(record.get("event_type"), EVENT_TYPES, "Event type"),
            "status": lambda: validate_choice(record.get("status"), EVENT_STATUSES, "Status"),
            "priority": lambda: validate_choice(record.get("priority"), tuple(PRIORITY_LEVELS), "Priority"),
            "scheduled_date": lambda: (
                _ok() if parse_date(record.get("scheduled_date")) else _fail("Scheduled date is required")
            ),
        }
    )
