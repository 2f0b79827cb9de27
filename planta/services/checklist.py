"""
Checklist field mapping.

Checklist items live as boolean columns on each area table. Operators send
them keyed by their human label ("Primer aplicado"); storage uses the
normalized field name ("primer_aplicado").
"""
import re
from typing import Any, Iterable, List

from text_unidecode import unidecode


# Columns of an area table that are never checklist items
RESERVED_COLUMNS = frozenset({"id", "color", "paint_code", "vin", "start_time", "end_time", "state"})

_TRUE_STRINGS = {"1", "true", "on", "yes"}
_SEPARATORS = re.compile(r"[^a-z0-9]+")


def normalize_label(label: str) -> str:
    """Label -> storage field name: ASCII, lowercase, runs of non [a-z0-9] -> '_'."""
    return _SEPARATORS.sub("_", unidecode(str(label or "")).lower()).strip("_")


def classify_checklist_columns(columns: Iterable[str]) -> List[str]:
    """Every column not in the reserved set, in schema order."""
    return [c for c in columns if c not in RESERVED_COLUMNS]


def coerce_flag(value: Any) -> int:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return 1 if value else 0
    if isinstance(value, str):
        return 1 if value.strip().lower() in _TRUE_STRINGS else 0
    return 0
