from .file_ingestor import (
    ingest_all_csvs,
    load_bovines_from_csv,
    load_disease_cases_from_csv,
    load_events_from_csv,
    load_vaccinations_from_csv,
)

__all__ = [
    "ingest_all_csvs",
    "load_bovines_from_csv",
    "load_disease_cases_from_csv",
    "load_events_from_csv",
    "load_vaccinations_from_csv",
]
