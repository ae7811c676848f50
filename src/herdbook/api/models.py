"""Composition DTOs for API layer.

Thin wrappers over the statistics models in utils.calculations; fields are
reused, not duplicated.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from ..utils.calculations import DiseaseStats, HealthStats, VaccinationStats


class UpcomingVaccination(BaseModel):
    """One dose due inside the look-ahead window."""
    bovine_id: Optional[str] = None
    ear_tag: Optional[str] = None
    vaccine_name: Optional[str] = None
    due_date: date


class HerdSummary(BaseModel):
    """Composition DTO: herd-wide statistics for the stats command."""
    as_of: date
    total_animals: int
    average_weight: float
    health: HealthStats
    vaccination: VaccinationStats
    diseases: DiseaseStats
    mortality_rate: float
    morbidity_rate: float
    upcoming_vaccinations: List[UpcomingVaccination] = []
