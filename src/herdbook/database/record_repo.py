"""Repository for herd record tables.

Collections are loaded as plain dicts in stable id order; they are the input
of the query engine and are never handed out as ORM rows.
"""

import json
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from herdbook.database.schema import Bovine, DiseaseCase, HerdEvent, Vaccination
from herdbook.utils.logging import get_logger

logger = get_logger(__name__)

BOVINE_COLUMNS = [
    "id",
    "ear_tag",
    "name",
    "type",
    "breed",
    "gender",
    "birth_date",
    "weight",
    "health_status",
    "mother_ear_tag",
    "father_ear_tag",
    "latitude",
    "longitude",
    "created_at",
    "updated_at",
]
VACCINATION_COLUMNS = [
    "id",
    "bovine_id",
    "vaccine_name",
    "vaccine_type",
    "dose",
    "application_date",
    "next_due_date",
    "veterinarian",
    "batch_number",
]
EVENT_COLUMNS = [
    "id",
    "title",
    "description",
    "event_type",
    "status",
    "priority",
    "scheduled_date",
    "bovine_id",
    "bovine_name",
    "bovine_tag",
    "veterinarian",
    "cost",
    "completed_at",
    "created_at",
]
DISEASE_COLUMNS = [
    "id",
    "animal_id",
    "animal_name",
    "animal_tag",
    "disease_name",
    "disease_type",
    "severity",
    "status",
    "diagnosis_date",
    "recovery_date",
    "follow_up_date",
    "veterinarian",
    "treatment",
    "sector",
    "is_contagious",
    "quarantine_required",
    "cost",
]


def _row_to_dict(row: Any, columns: List[str]) -> Dict[str, Any]:
    return {column: getattr(row, column) for column in columns}


def _load_tags(tags_json: Optional[str]) -> List[str]:
    if not tags_json:
        return []
    try:
        tags = json.loads(tags_json)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Ignoring malformed tags_json: {tags_json!r}")
        return []
    if not isinstance(tags, list):
        return []
    return [str(tag) for tag in tags]


def load_bovine_records(session: Session) -> List[Dict[str, Any]]:
    """All bovines as record dicts, each with its `vaccinations` list (oldest dose first)."""
    vaccinations_by_bovine: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for vaccination in session.query(Vaccination).order_by(Vaccination.application_date, Vaccination.id):
        vaccinations_by_bovine[vaccination.bovine_id].append(_row_to_dict(vaccination, VACCINATION_COLUMNS))

    records = []
    for bovine in session.query(Bovine).order_by(Bovine.id):
        record = _row_to_dict(bovine, BOVINE_COLUMNS)
        record["vaccinations"] = vaccinations_by_bovine.get(bovine.id, [])
        records.append(record)
    return records


def load_event_records(session: Session) -> List[Dict[str, Any]]:
    records = []
    for event in session.query(HerdEvent).order_by(HerdEvent.id):
        record = _row_to_dict(event, EVENT_COLUMNS)
        record["tags"] = _load_tags(event.tags_json)
        records.append(record)
    return records


def load_disease_records(session: Session) -> List[Dict[str, Any]]:
    return [_row_to_dict(case, DISEASE_COLUMNS) for case in session.query(DiseaseCase).order_by(DiseaseCase.id)]


def find_bovine_by_ear_tag(session: Session, ear_tag: str) -> Optional[Bovine]:
    return session.query(Bovine).filter(Bovine.ear_tag == ear_tag).first()


def save_bovine(session: Session, record: Dict[str, Any]) -> Bovine:
    """
    Insert or update a bovine by id.

    Raises:
        ValueError: If the record has no id
    """
    if not record.get("id"):
        raise ValueError("Bovine must have id")
    row = session.merge(Bovine(**{column: record.get(column) for column in BOVINE_COLUMNS}))
    logger.debug(f"Saved bovine: {record['id']}")
    return row


def save_vaccination(session: Session, record: Dict[str, Any]) -> Vaccination:
    if not record.get("id"):
        raise ValueError("Vaccination must have id")
    if not record.get("bovine_id"):
        raise ValueError("Vaccination must have bovine_id")
    row = session.merge(Vaccination(**{column: record.get(column) for column in VACCINATION_COLUMNS}))
    logger.debug(f"Saved vaccination: {record['id']}")
    return row


def save_event(session: Session, record: Dict[str, Any]) -> HerdEvent:
    if not record.get("id"):
        raise ValueError("Event must have id")
    values = {column: record.get(column) for column in EVENT_COLUMNS}
    values["tags_json"] = json.dumps(list(record.get("tags") or []))
    row = session.merge(HerdEvent(**values))
    logger.debug(f"Saved event: {record['id']}")
    return row


def save_disease_case(session: Session, record: Dict[str, Any]) -> DiseaseCase:
    if not record.get("id"):
        raise ValueError("Disease case must have id")
    values = {column: record.get(column) for column in DISEASE_COLUMNS}
    values["is_contagious"] = bool(record.get("is_contagious"))
    values["quarantine_required"] = bool(record.get("quarantine_required"))
    row = session.merge(DiseaseCase(**values))
    logger.debug(f"Saved disease case: {record['id']}")
    return row
