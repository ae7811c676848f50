"""Herd calculations: ages, distances and summary statistics over record dicts."""

import calendar
import math
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from .time import parse_date

EARTH_RADIUS_METERS = 6371000
DAYS_PER_YEAR = 365.25

Record = Mapping[str, Any]


class Age(BaseModel):
    years: int
    months: int
    days: int


class HealthStats(BaseModel):
    total: int
    healthy: int
    sick: int
    quarantine: int
    recovering: int
    dead: int
    health_percentage: int


class VaccinationStats(BaseModel):
    total_vaccinations: int
    up_to_date: int
    overdue: int
    coverage: int
    average_vaccinations_per_animal: float


class DiseaseStats(BaseModel):
    total_cases: int
    active_cases: int
    recovered_cases: int
    critical_cases: int
    new_cases_this_week: int
    recovery_rate: float
    average_recovery_days: float
    most_common_disease: Optional[str] = None
    affected_sectors: int
    total_cost: float


def calculate_age(birth_date: date, today: date) -> Age:
    """Calendar age, borrowing days from the previous month and months from the year."""
    years = today.year - birth_date.year
    months = today.month - birth_date.month
    days = today.day - birth_date.day

    if days < 0:
        months -= 1
        previous_month = today.month - 1 or 12
        previous_year = today.year if today.month > 1 else today.year - 1
        days += calendar.monthrange(previous_year, previous_month)[1]

    if months < 0:
        years -= 1
        months += 12

    return Age(years=years, months=months, days=days)


def calculate_age_in_months(birth_date: date, today: date) -> int:
    total_months = (today.year - birth_date.year) * 12 + (today.month - birth_date.month)
    if today.day < birth_date.day:
        total_months -= 1
    return total_months


def calculate_age_in_years(birth_date: date, today: date) -> int:
    """Whole years of 365.25 days."""
    return math.floor((today - birth_date).days / DAYS_PER_YEAR)


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance in metres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def _has_location(animal: Record) -> bool:
    return animal.get("latitude") is not None and animal.get("longitude") is not None


def find_cattle_in_radius(
    cattle: Iterable[Record],
    center_lat: float,
    center_lon: float,
    radius_meters: float,
) -> List[Record]:
    """Animals within radius_meters of a point; animals without a position are skipped."""
    return [
        animal
        for animal in cattle
        if _has_location(animal)
        and calculate_distance(center_lat, center_lon, animal["latitude"], animal["longitude"]) <= radius_meters
    ]


def calculate_geographic_center(cattle: Sequence[Record]) -> Optional[Dict[str, float]]:
    located = [animal for animal in cattle if _has_location(animal)]
    if not located:
        return None
    return {
        "latitude": sum(animal["latitude"] for animal in located) / len(located),
        "longitude": sum(animal["longitude"] for animal in located) / len(located),
    }


def calculate_density(cattle: Sequence[Record], area_square_meters: float) -> float:
    """Animals per hectare."""
    if area_square_meters <= 0:
        return 0.0
    return len(cattle) / (area_square_meters / 10000)


def calculate_percentage(part: float, total: float, decimals: int = 0) -> float:
    """part/total as a percentage, 0 when total is 0."""
    if not total:
        return 0
    value = round(part / total * 100, decimals)
    return int(value) if decimals == 0 else value


def calculate_average_weight(cattle: Sequence[Record]) -> float:
    weights = [animal["weight"] for animal in cattle if isinstance(animal.get("weight"), (int, float))]
    if not weights:
        return 0
    return round(sum(weights) / len(weights), 2)


def calculate_health_stats(cattle: Sequence[Record]) -> HealthStats:
    counts = Counter(animal.get("health_status") for animal in cattle)
    total = len(cattle)
    healthy = counts.get("healthy", 0)
    return HealthStats(
        total=total,
        healthy=healthy,
        sick=counts.get("sick", 0),
        quarantine=counts.get("quarantine", 0),
        recovering=counts.get("recovering", 0),
        dead=counts.get("dead", 0),
        health_percentage=calculate_percentage(healthy, total),
    )


def calculate_vaccination_stats(cattle: Sequence[Record], today: date) -> VaccinationStats:
    """
    Vaccination coverage over animals carrying a `vaccinations` list.

    An animal counts as up to date when it has never been vaccinated, when a
    dose carries no due date, or when some dose is due after today.
    """
    total_cattle = len(cattle)
    if total_cattle == 0:
        return VaccinationStats(
            total_vaccinations=0,
            up_to_date=0,
            overdue=0,
            coverage=0,
            average_vaccinations_per_animal=0,
        )

    total_vaccinations = 0
    up_to_date = 0
    overdue = 0
    for animal in cattle:
        vaccinations = animal.get("vaccinations") or []
        total_vaccinations += len(vaccinations)
        current = not vaccinations or any(
            parse_date(v.get("next_due_date")) is None or parse_date(v.get("next_due_date")) > today
            for v in vaccinations
        )
        if current:
            up_to_date += 1
        else:
            overdue += 1

    return VaccinationStats(
        total_vaccinations=total_vaccinations,
        up_to_date=up_to_date,
        overdue=overdue,
        coverage=calculate_percentage(up_to_date, total_cattle),
        average_vaccinations_per_animal=round(total_vaccinations / total_cattle, 2),
    )


def calculate_disease_stats(cases: Sequence[Record], today: date) -> DiseaseStats:
    total = len(cases)
    statuses = Counter(case.get("status") for case in cases)
    recovery_days = []
    for case in cases:
        diagnosed = parse_date(case.get("diagnosis_date"))
        recovered = parse_date(case.get("recovery_date"))
        if diagnosed and recovered:
            recovery_days.append((recovered - diagnosed).days)

    week_start = today - timedelta(days=7)
    new_this_week = 0
    for case in cases:
        diagnosed = parse_date(case.get("diagnosis_date"))
        if diagnosed is not None and week_start <= diagnosed <= today:
            new_this_week += 1

    diseases = Counter(case.get("disease_name") for case in cases if case.get("disease_name"))
    most_common = diseases.most_common(1)[0][0] if diseases else None
    sectors = {case.get("sector") for case in cases if case.get("sector")}

    return DiseaseStats(
        total_cases=total,
        active_cases=statuses.get("active", 0) + statuses.get("treating", 0),
        recovered_cases=statuses.get("recovered", 0),
        critical_cases=sum(1 for case in cases if case.get("severity") == "critical"),
        new_cases_this_week=new_this_week,
        recovery_rate=calculate_percentage(statuses.get("recovered", 0), total, decimals=1),
        average_recovery_days=round(sum(recovery_days) / len(recovery_days), 1) if recovery_days else 0,
        most_common_disease=most_common,
        affected_sectors=len(sectors),
        total_cost=round(sum(float(case.get("cost") or 0) for case in cases), 2),
    )


def calculate_mortality_rate(cattle: Sequence[Record], today: date, window_days: int = 365) -> float:
    """Percentage of animals that died (status dead, updated inside the window)."""
    if not cattle:
        return 0
    start = today - timedelta(days=window_days)
    dead = 0
    for animal in cattle:
        updated = parse_date(animal.get("updated_at"))
        if animal.get("health_status") == "dead" and updated is not None and start <= updated <= today:
            dead += 1
    return round(dead / len(cattle) * 100, 2)


def calculate_morbidity_rate(
    cattle: Sequence[Record],
    cases: Iterable[Record],
    today: date,
    window_days: int = 365,
) -> float:
    """Percentage of animals with at least one diagnosis inside the window."""
    if not cattle:
        return 0
    start = today - timedelta(days=window_days)
    sick_ids = set()
    for case in cases:
        diagnosed = parse_date(case.get("diagnosis_date"))
        if diagnosed is not None and start <= diagnosed <= today:
            sick_ids.add(case.get("animal_id"))
    return round(len(sick_ids) / len(cattle) * 100, 2)


def calculate_upcoming_vaccinations(
    cattle: Iterable[Record],
    today: date,
    days_ahead: int = 30,
) -> List[Dict[str, Any]]:
    """Doses due between today and today + days_ahead, soonest first."""
    horizon = today + timedelta(days=days_ahead)
    upcoming: List[Dict[str, Any]] = []
    for animal in cattle:
        for vaccination in animal.get("vaccinations") or []:
            due = parse_date(vaccination.get("next_due_date"))
            if due is not None and today <= due <= horizon:
                upcoming.append(
                    {
                        "bovine_id": animal.get("id"),
                        "ear_tag": animal.get("ear_tag"),
                        "vaccine_name": vaccination.get("vaccine_name"),
                        "due_date": due,
                    }
                )
    return sorted(upcoming, key=lambda entry: entry["due_date"])
