import csv
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..database.record_repo import (
    find_bovine_by_ear_tag,
    save_bovine,
    save_disease_case,
    save_event,
    save_vaccination,
)
from ..utils.id_generator import new_vaccination_id
from ..utils.logging import get_logger
from ..utils.time import parse_date, today_utc, utc_now_z
from ..utils.validators import (
    get_first_validation_error,
    has_validation_errors,
    validate_bovine,
    validate_disease_case,
    validate_event,
    validate_vaccination_date,
)

logger = get_logger(__name__)

TRUE_VALUES = {"1", "true", "yes", "y", "si", "sí"}


def _text(row: Dict[str, str], key: str) -> Optional[str]:
    value = (row.get(key) or "").strip()
    return value or None


def _float(row: Dict[str, str], key: str) -> Optional[float]:
    value = _text(row, key)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _bool(row: Dict[str, str], key: str) -> bool:
    return (_text(row, key) or "").lower() in TRUE_VALUES


def _tags(row: Dict[str, str], key: str) -> list:
    value = _text(row, key)
    if value is None:
        return []
    return [tag.strip() for tag in value.split(";") if tag.strip()]


def _skip(kind: str, row_number: int, errors: Dict[str, str]) -> None:
    logger.warning(f"Skipping {kind} row {row_number}: {get_first_validation_error(errors)}")


def load_bovines_from_csv(csv_path: Path, session: Session, today: date | None = None) -> int:
    """
    Load bovines from CSV and insert into database.

    Expected CSV columns: id, ear_tag, name, type, breed, gender, birth_date, weight,
    health_status, mother_ear_tag, father_ear_tag, latitude, longitude
    Rows failing validation are skipped with a warning.
    """
    if not csv_path.exists():
        logger.warning(f"CSV file not found: {csv_path}")
        return 0

    reference = today or today_utc()
    now = utc_now_z()
    count = 0
    with csv_path.open("r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row_number, row in enumerate(reader, start=2):
            record: Dict[str, Any] = {
                "id": _text(row, "id") or _text(row, "ear_tag"),
                "ear_tag": _text(row, "ear_tag"),
                "name": _text(row, "name"),
                "type": _text(row, "type"),
                "breed": _text(row, "breed"),
                "gender": _text(row, "gender"),
                "birth_date": _text(row, "birth_date"),
                "weight": _float(row, "weight"),
                "health_status": _text(row, "health_status") or "healthy",
                "mother_ear_tag": _text(row, "mother_ear_tag"),
                "father_ear_tag": _text(row, "father_ear_tag"),
                "latitude": _float(row, "latitude"),
                "longitude": _float(row, "longitude"),
                "created_at": _text(row, "created_at") or now,
                "updated_at": _text(row, "updated_at") or now,
            }
            errors = validate_bovine(record, reference)
            if not record["breed"]:
                errors["breed"] = "Breed is required"
            if record["ear_tag"] and "ear_tag" not in errors:
                owner = find_bovine_by_ear_tag(session, record["ear_tag"])
                if owner is not None and owner.id != record["id"]:
                    errors["ear_tag"] = f"Ear tag {record['ear_tag']} already belongs to bovine {owner.id}"
            if has_validation_errors(errors):
                _skip("bovine", row_number, errors)
                continue
            save_bovine(session, record)
            count += 1

    session.commit()
    logger.info(f"Loaded {count} bovines from {csv_path}")
    return count


def load_vaccinations_from_csv(csv_path: Path, session: Session, today: date | None = None) -> int:
    """
    Load vaccinations from CSV.

    Expected CSV columns: id, bovine_id, vaccine_name, vaccine_type, dose,
    application_date, next_due_date, veterinarian, batch_number
    An ear_tag column may stand in for bovine_id; the bovine must already be loaded.
    """
    if not csv_path.exists():
        logger.warning(f"CSV file not found: {csv_path}")
        return 0

    reference = today or today_utc()
    count = 0
    with csv_path.open("r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row_number, row in enumerate(reader, start=2):
            bovine_id = _text(row, "bovine_id")
            ear_tag = _text(row, "ear_tag")
            if not bovine_id and ear_tag:
                bovine = find_bovine_by_ear_tag(session, ear_tag)
                bovine_id = bovine.id if bovine else None
            record = {
                "id": _text(row, "id") or new_vaccination_id(),
                "bovine_id": bovine_id,
                "vaccine_name": _text(row, "vaccine_name"),
                "vaccine_type": _text(row, "vaccine_type"),
                "dose": _text(row, "dose"),
                "application_date": _text(row, "application_date"),
                "next_due_date": _text(row, "next_due_date"),
                "veterinarian": _text(row, "veterinarian"),
                "batch_number": _text(row, "batch_number"),
            }
            errors: Dict[str, str] = {}
            if not record["bovine_id"]:
                errors["bovine_id"] = "Bovine id is required"
            if not record["vaccine_name"]:
                errors["vaccine_name"] = "Vaccine name is required"
            applied = validate_vaccination_date(parse_date(record["application_date"]), reference)
            if not applied.is_valid:
                errors["application_date"] = applied.error or "Invalid application date"
            if has_validation_errors(errors):
                _skip("vaccination", row_number, errors)
                continue
            save_vaccination(session, record)
            count += 1

    session.commit()
    logger.info(f"Loaded {count} vaccinations from {csv_path}")
    return count


def load_events_from_csv(csv_path: Path, session: Session) -> int:
    """
    Load herd events from CSV.

    Expected CSV columns: id, title, description, event_type, status, priority,
    scheduled_date, bovine_id, bovine_name, bovine_tag, veterinarian, cost,
    tags (semicolon separated), completed_at
    """
    if not csv_path.exists():
        logger.warning(f"CSV file not found: {csv_path}")
        return 0

    now = utc_now_z()
    count = 0
    with csv_path.open("r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row_number, row in enumerate(reader, start=2):
            record = {
                "id": _text(row, "id"),
                "title": _text(row, "title"),
                "description": _text(row, "description"),
                "event_type": _text(row, "event_type"),
                "status": _text(row, "status") or "scheduled",
                "priority": _text(row, "priority") or "medium",
                "scheduled_date": _text(row, "scheduled_date"),
                "bovine_id": _text(row, "bovine_id"),
                "bovine_name": _text(row, "bovine_name"),
                "bovine_tag": _text(row, "bovine_tag"),
                "veterinarian": _text(row, "veterinarian"),
                "cost": _float(row, "cost"),
                "tags": _tags(row, "tags"),
                "completed_at": _text(row, "completed_at"),
                "created_at": _text(row, "created_at") or now,
            }
            errors = validate_event(record)
            if not record["id"]:
                errors["id"] = "Event id is required"
            if has_validation_errors(errors):
                _skip("event", row_number, errors)
                continue
            save_event(session, record)
            count += 1

    session.commit()
    logger.info(f"Loaded {count} events from {csv_path}")
    return count


def load_disease_cases_from_csv(csv_path: Path, session: Session, today: date | None = None) -> int:
    """
    Load disease cases from CSV.

    Expected CSV columns: id, animal_id, animal_name, animal_tag, disease_name,
    disease_type, severity, status, diagnosis_date, recovery_date, follow_up_date,
    veterinarian, treatment, sector, is_contagious, quarantine_required, cost
    """
    if not csv_path.exists():
        logger.warning(f"CSV file not found: {csv_path}")
        return 0

    reference = today or today_utc()
    count = 0
    with csv_path.open("r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row_number, row in enumerate(reader, start=2):
            record = {
                "id": _text(row, "id"),
                "animal_id": _text(row, "animal_id"),
                "animal_name": _text(row, "animal_name"),
                "animal_tag": _text(row, "animal_tag"),
                "disease_name": _text(row, "disease_name"),
                "disease_type": _text(row, "disease_type"),
                "severity": _text(row, "severity"),
                "status": _text(row, "status") or "active",
                "diagnosis_date": _text(row, "diagnosis_date"),
                "recovery_date": _text(row, "recovery_date"),
                "follow_up_date": _text(row, "follow_up_date"),
                "veterinarian": _text(row, "veterinarian"),
                "treatment": _text(row, "treatment"),
                "sector": _text(row, "sector"),
                "is_contagious": _bool(row, "is_contagious"),
                "quarantine_required": _bool(row, "quarantine_required"),
                "cost": _float(row, "cost"),
            }
            errors = validate_disease_case(record, reference)
            if not record["id"]:
                errors["id"] = "Case id is required"
            if has_validation_errors(errors):
                _skip("disease case", row_number, errors)
                continue
            save_disease_case(session, record)
            count += 1

    session.commit()
    logger.info(f"Loaded {count} disease cases from {csv_path}")
    return count


def ingest_all_csvs(
    session: Session,
    bovines_path: Path | None = None,
    vaccinations_path: Path | None = None,
    events_path: Path | None = None,
    diseases_path: Path | None = None,
    today: date | None = None,
) -> Dict[str, int]:
    """
    Load whichever CSV files are given, bovines before their vaccinations.

    Returns a dict with counts per record kind (0 for files not given).
    """
    return {
        "bovines": load_bovines_from_csv(bovines_path, session, today) if bovines_path else 0,
        "vaccinations": load_vaccinations_from_csv(vaccinations_path, session, today) if vaccinations_path else 0,
        "events": load_events_from_csv(events_path, session) if events_path else 0,
        "diseases": load_disease_cases_from_csv(diseases_path, session, today) if diseases_path else 0,
    }
