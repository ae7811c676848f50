"""Export API: query results as JSON or CSV for external consumption."""

import csv
import json
from datetime import date
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..database.record_repo import BOVINE_COLUMNS, DISEASE_COLUMNS, EVENT_COLUMNS
from ..query import QueryDescriptor
from ..records import DEFAULT_DUE_SOON_DAYS
from ..utils.time import utc_now_z
from .records_api import list_records

CSV_COLUMNS: Dict[str, List[str]] = {
    "bovines": BOVINE_COLUMNS + ["vaccination_count", "last_vaccine_name"],
    "events": EVENT_COLUMNS + ["tags"],
    "diseases": DISEASE_COLUMNS,
}


def _flatten(kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
    """CSV row for a record: no nested structures."""
    row = dict(record)
    if kind == "bovines":
        vaccinations = record.get("vaccinations") or []
        row["vaccination_count"] = len(vaccinations)
        row["last_vaccine_name"] = vaccinations[-1].get("vaccine_name") if vaccinations else None
    elif kind == "events":
        row["tags"] = ";".join(record.get("tags") or [])
    return row


def _write(output: str, out: Path | None, newline: Optional[str] = None) -> str:
    if out:
        out.write_text(output, encoding="utf-8", newline=newline)
        return f"Exported to {out}"
    return output


def export_records(
    session: Session,
    kind: str,
    descriptor: QueryDescriptor | None = None,
    format: str = "json",
    out: Path | None = None,
    today: Optional[date] = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    near: Optional[Tuple[float, float]] = None,
) -> str:
    """
    Export one page of query results.

    Args:
        session: SQLAlchemy session
        kind: "bovines", "events" or "diseases"
        descriptor: Search, filters, sort and page to export
        format: Export format ("json" or "csv")
        out: Output file path (if None, returns as string)
        today: Reference date for derived fields
        due_soon_days: Window for the "due soon" vaccination status
        near: (latitude, longitude) that bovine distance_m is measured from

    Returns:
        Exported data as string (if out is None) or a confirmation after writing the file

    Raises:
        ValueError: If kind or format is unsupported
    """
    if format not in ("json", "csv"):
        raise ValueError(f"Unsupported format: {format}")

    descriptor = descriptor or QueryDescriptor()
    result = list_records(session, kind, descriptor, today=today, due_soon_days=due_soon_days, near=near)

    if format == "json":
        export_data = {
            "export_schema_version": "1",
            "exported_at_utc": utc_now_z(),
            "kind": kind,
            "query": descriptor.model_dump(mode="json"),
            "data": result.model_dump(mode="json"),
        }
        return _write(json.dumps(export_data, indent=2, sort_keys=True, default=str), out)

    # CSV: stable column order, nested fields flattened
    columns = CSV_COLUMNS[kind]
    output_buffer = StringIO()
    writer = csv.writer(output_buffer)
    writer.writerow(columns)
    for record in result.items:
        row = _flatten(kind, record)
        writer.writerow(["" if row.get(col) is None else row.get(col) for col in columns])
    return _write(output_buffer.getvalue(), out, newline="")
