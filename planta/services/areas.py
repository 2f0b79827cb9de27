from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sqlalchemy import Table

from ..areas import AREA_ALIASES, AREA_DESCRIPTORS, AREA_KEYS, ChecklistField
from ..errors import InvalidArea
from ..models.areas import AREA_TABLES
from .checklist import classify_checklist_columns


@dataclass(frozen=True)
class AreaTarget:
    key: str
    title: str
    table_name: str
    table: Table
    checklist: Tuple[ChecklistField, ...]
    checklist_fields: Tuple[str, ...]

    def has_column(self, name: str) -> bool:
        return name in self.table.c


def _build_target(key: str) -> AreaTarget:
    descriptor = AREA_DESCRIPTORS[key]
    table = AREA_TABLES[key]
    return AreaTarget(
        key=key,
        title=descriptor.title,
        table_name=descriptor.table_name,
        table=table,
        checklist=descriptor.checklist,
        checklist_fields=tuple(classify_checklist_columns(table.c.keys())),
    )


_TARGETS: Dict[str, AreaTarget] = {key: _build_target(key) for key in AREA_KEYS}
_BY_TABLE: Dict[str, AreaTarget] = {t.table_name: t for t in _TARGETS.values()}


def resolve(area_key: Optional[str]) -> AreaTarget:
    key = (area_key or "").strip().lower()
    key = AREA_ALIASES.get(key, key)
    target = _TARGETS.get(key)
    if target is None:
        raise InvalidArea(area_key)
    return target


def area_for_table(table_name: Optional[str]) -> Optional[AreaTarget]:
    return _BY_TABLE.get(table_name or "")


def all_areas() -> Tuple[AreaTarget, ...]:
    return tuple(_TARGETS[key] for key in AREA_KEYS)
