"""Area record tables, one per production area, built from the area descriptors."""
from typing import Dict

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Table

from ..areas import AREA_DESCRIPTORS, AreaDescriptor
from ..db import Base


STATE_PENDING = "pendiente"
STATE_FINALIZED = "finalizada"


def build_area_table(descriptor: AreaDescriptor) -> Table:
    columns = [Column("id", Integer, primary_key=True, autoincrement=True)]
    if "vin" in descriptor.columns:
        columns.append(Column("vin", String(64), nullable=True))
    if "color" in descriptor.columns:
        columns.append(Column("color", String(100), nullable=True))
    if "paint_code" in descriptor.columns:
        columns.append(Column("paint_code", String(50), nullable=True))
    columns += [
        Column("state", String(20), nullable=False, default=STATE_PENDING),
        Column("start_time", DateTime, nullable=True),
        Column("end_time", DateTime, nullable=True),
    ]
    for field in descriptor.checklist:
        columns.append(Column(field.field_name, Boolean, nullable=False, default=False))

    indexes = []
    if "vin" in descriptor.columns:
        indexes.append(Index(f"ix_{descriptor.table_name}_vin_state", "vin", "state"))

    return Table(descriptor.table_name, Base.metadata, *columns, *indexes)


AREA_TABLES: Dict[str, Table] = {key: build_area_table(d) for key, d in AREA_DESCRIPTORS.items()}
