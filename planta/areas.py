"""
Per-area schema descriptors.

Each production area owns one table. Besides the reserved columns, every
column of that table is a checklist item; the descriptors below list those
items in display order. They are loaded once at import time, from the
built-in defaults or from the JSON file named by AREA_SCHEMA_FILE:

    {
      "chasis": {"columns": ["vin"], "checklist": ["Primer aplicado", "..."]},
      ...
    }
"""
import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import settings
from .services.checklist import RESERVED_COLUMNS, normalize_label


# Area keys as the frontend sends them, in listing order
AREA_KEYS = ("pintura", "chasis", "premontaje", "montaje")

AREA_TITLES = {
    "pintura": "Pintura",
    "chasis": "Chasis",
    "premontaje": "Premontaje",
    "montaje": "Montaje",
}

# English names accepted as synonyms of the localized keys
AREA_ALIASES = {
    "paint": "pintura",
    "chassis": "chasis",
    "pre-assembly": "premontaje",
    "assembly": "montaje",
}

OPTIONAL_COLUMNS = ("vin", "color", "paint_code")


@dataclass(frozen=True)
class ChecklistField:
    field_name: str
    display_label: str


@dataclass(frozen=True)
class AreaDescriptor:
    key: str
    title: str
    table_name: str
    columns: Tuple[str, ...]
    checklist: Tuple[ChecklistField, ...]


DEFAULT_AREAS = {
    "pintura": {
        "columns": ["vin", "color", "paint_code"],
        "checklist": [
            "Lijado",
            "Imprimación",
            "Masillado",
            "Capa de color",
            "Barniz",
            "Secado en horno",
            "Inspección de acabado",
        ],
    },
    "chasis": {
        "columns": ["vin"],
        "checklist": [
            "Primer aplicado",
            "Soldadura revisada",
            "Bastidor granallado",
            "Numeración grabada",
            "Anclajes de suspensión",
            "Control dimensional",
        ],
    },
    "premontaje": {
        "columns": ["vin", "color"],
        "checklist": [
            "Cableado principal",
            "Tubos de freno",
            "Depósito de combustible",
            "Soportes de motor",
            "Aislamiento acústico",
        ],
    },
    "montaje": {
        "columns": ["vin", "color"],
        "checklist": [
            "Motor instalado",
            "Transmisión",
            "Ruedas montadas",
            "Asientos",
            "Salpicadero",
            "Prueba de luces",
            "Prueba de frenos",
        ],
    },
}


def build_descriptor(key: str, raw: dict) -> AreaDescriptor:
    columns = tuple(raw.get("columns") or ())
    unknown = [c for c in columns if c not in OPTIONAL_COLUMNS]
    if unknown:
        raise ValueError(f"Area '{key}': unsupported columns {unknown}")

    fields: List[ChecklistField] = []
    seen: Dict[str, str] = {}
    for label in raw.get("checklist") or ():
        name = normalize_label(label)
        if not name:
            raise ValueError(f"Area '{key}': checklist label {label!r} normalizes to an empty name")
        if name in RESERVED_COLUMNS:
            raise ValueError(f"Area '{key}': checklist label {label!r} collides with reserved column '{name}'")
        if name in seen:
            raise ValueError(f"Area '{key}': labels {seen[name]!r} and {label!r} both map to '{name}'")
        seen[name] = label
        fields.append(ChecklistField(field_name=name, display_label=label))

    return AreaDescriptor(
        key=key,
        title=AREA_TITLES[key],
        table_name=f"tareas_{key}",
        columns=columns,
        checklist=tuple(fields),
    )


def load_descriptors(path: Optional[str] = None) -> Dict[str, AreaDescriptor]:
    raw_areas = DEFAULT_AREAS
    if path:
        with open(path, encoding="utf-8") as fh:
            raw_areas = json.load(fh)
    missing = [k for k in AREA_KEYS if k not in raw_areas]
    if missing:
        raise ValueError(f"Area schema is missing areas: {missing}")
    return {key: build_descriptor(key, raw_areas[key]) for key in AREA_KEYS}


AREA_DESCRIPTORS = load_descriptors(settings.area_schema_file)
