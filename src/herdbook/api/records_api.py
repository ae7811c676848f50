"""Records API: canonical query surface for bovines, events and disease cases."""

from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..database.record_repo import load_bovine_records, load_disease_records, load_event_records
from ..query import QueryDescriptor, QueryResult, query
from ..records import DEFAULT_DUE_SOON_DAYS, RECORD_KINDS, get_field_config
from ..utils.calculations import (
    calculate_average_weight,
    calculate_disease_stats,
    calculate_health_stats,
    calculate_morbidity_rate,
    calculate_mortality_rate,
    calculate_upcoming_vaccinations,
    calculate_vaccination_stats,
)
from ..utils.logging import get_logger
from ..utils.time import today_utc
from .models import HerdSummary, UpcomingVaccination

logger = get_logger(__name__)

_LOADERS: Dict[str, Callable[[Session], List[Dict[str, Any]]]] = {
    "bovines": load_bovine_records,
    "events": load_event_records,
    "diseases": load_disease_records,
}


def load_records(session: Session, kind: str) -> List[Dict[str, Any]]:
    """
    Full collection of one record kind, in stable id order.

    Raises:
        ValueError: If kind is not one of RECORD_KINDS
    """
    loader = _LOADERS.get(kind)
    if loader is None:
        raise ValueError(f"Unknown record kind: {kind} (expected one of {', '.join(RECORD_KINDS)})")
    return loader(session)


def list_records(
    session: Session,
    kind: str,
    descriptor: QueryDescriptor | None = None,
    today: Optional[date] = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    near: Optional[Tuple[float, float]] = None,
) -> QueryResult:
    """
    Run a query descriptor against every stored record of one kind.

    Args:
        session: SQLAlchemy session
        kind: "bovines", "events" or "diseases"
        descriptor: Search, filters, sort and page (defaults to the first page of everything)
        today: Reference date for derived fields (defaults to today UTC)
        due_soon_days: Window for the "due soon" vaccination status
        near: (latitude, longitude) that bovine distance_m is measured from

    Returns:
        QueryResult for the requested page

    Raises:
        ValueError: If kind is unknown
    """
    config = get_field_config(kind, today=today or today_utc(), due_soon_days=due_soon_days, near=near)
    records = load_records(session, kind)
    result = query(records, descriptor or QueryDescriptor(), config)
    logger.debug(f"Listed {kind}: {result.total_matched} matched, page {result.page}/{result.total_pages}")
    return result


def list_bovines(
    session: Session,
    descriptor: QueryDescriptor | None = None,
    today: Optional[date] = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    near: Optional[Tuple[float, float]] = None,
) -> QueryResult:
    return list_records(session, "bovines", descriptor, today=today, due_soon_days=due_soon_days, near=near)


def list_events(
    session: Session,
    descriptor: QueryDescriptor | None = None,
    today: Optional[date] = None,
) -> QueryResult:
    return list_records(session, "events", descriptor, today=today)


def list_disease_cases(
    session: Session,
    descriptor: QueryDescriptor | None = None,
    today: Optional[date] = None,
) -> QueryResult:
    return list_records(session, "diseases", descriptor, today=today)


def get_herd_summary(
    session: Session,
    today: Optional[date] = None,
    days_ahead: int = DEFAULT_DUE_SOON_DAYS,
) -> HerdSummary:
    """
    Herd-wide statistics over every stored bovine and disease case.

    Args:
        session: SQLAlchemy session
        today: Reference date (defaults to today UTC)
        days_ahead: Look-ahead window for upcoming vaccinations

    Returns:
        HerdSummary
    """
    reference = today or today_utc()
    cattle = load_bovine_records(session)
    cases = load_disease_records(session)
    upcoming = calculate_upcoming_vaccinations(cattle, reference, days_ahead=days_ahead)
    return HerdSummary(
        as_of=reference,
        total_animals=len(cattle),
        average_weight=calculate_average_weight(cattle),
        health=calculate_health_stats(cattle),
        vaccination=calculate_vaccination_stats(cattle, reference),
        diseases=calculate_disease_stats(cases, reference),
        mortality_rate=calculate_mortality_rate(cattle, reference),
        morbidity_rate=calculate_morbidity_rate(cattle, cases, reference),
        upcoming_vaccinations=[UpcomingVaccination(**entry) for entry in upcoming],
    )
