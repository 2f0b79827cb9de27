"""
Ownership ledger.

Append-only links between users and area records (table "tareas"). The
earliest link of a record names its owner; a user's links feed the
"my pending tasks" listing.
"""
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.models import TareaVinculo


def exists(db: Session, user_id: int, table_name: str, record_id: int) -> bool:
    return (
        db.query(TareaVinculo.id)
        .filter(
            TareaVinculo.id_usuario == user_id,
            TareaVinculo.tabla_area == table_name,
            TareaVinculo.id_tarea_area == record_id,
        )
        .first()
        is not None
    )


def append_if_absent(db: Session, user_id: int, table_name: str, record_id: int, created: date) -> bool:
    if exists(db, user_id, table_name, record_id):
        return False
    db.add(
        TareaVinculo(
            id_usuario=user_id,
            tabla_area=table_name,
            id_tarea_area=record_id,
            fecha_creacion=created,
        )
    )
    db.flush()
    return True


def owner_of(db: Session, table_name: str, record_id: int) -> Optional[int]:
    row = (
        db.query(TareaVinculo.id_usuario)
        .filter(TareaVinculo.tabla_area == table_name, TareaVinculo.id_tarea_area == record_id)
        .order_by(TareaVinculo.id.asc())
        .first()
    )
    return row[0] if row else None


def links_for_user(db: Session, user_id: int, limit: int = 1000) -> List[Tuple[str, int, date]]:
    rows = (
        db.query(TareaVinculo.tabla_area, TareaVinculo.id_tarea_area, TareaVinculo.fecha_creacion)
        .filter(TareaVinculo.id_usuario == user_id)
        .order_by(TareaVinculo.id.desc())
        .limit(limit)
        .all()
    )
    return [(r[0], r[1], r[2]) for r in rows]
