"""Record types known to herdbook and their field registries."""

from datetime import date
from typing import Optional, Tuple

from ..query.fields import FieldConfig
from .bovines import BOVINE_PRESETS, DEFAULT_DUE_SOON_DAYS, apply_preset, bovine_field_config, needs_vaccination
from .diseases import disease_field_config
from .events import event_field_config

RECORD_KINDS = ("bovines", "events", "diseases")


def get_field_config(
    kind: str,
    today: Optional[date] = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    near: Optional[Tuple[float, float]] = None,
) -> FieldConfig:
    """
    Field registry for a record kind.

    `near` adds a distance_m field to bovines; other kinds carry no position.

    Raises:
        ValueError: If kind is not one of RECORD_KINDS
    """
    if kind == "bovines":
        return bovine_field_config(today=today, due_soon_days=due_soon_days, near=near)
    if kind == "events":
        return event_field_config(today=today)
    if kind == "diseases":
        return disease_field_config(today=today)
    raise ValueError(f"Unknown record kind: {kind} (expected one of {', '.join(RECORD_KINDS)})")


__all__ = [
    "BOVINE_PRESETS",
    "DEFAULT_DUE_SOON_DAYS",
    "RECORD_KINDS",
    "apply_preset",
    "bovine_field_config",
    "disease_field_config",
    "event_field_config",
    "get_field_config",
    "needs_vaccination",
]
