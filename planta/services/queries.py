"""
Read-only projections over the area tables and the ownership ledger.
"""
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidArea, NotFound
from ..models.areas import STATE_FINALIZED, STATE_PENDING
from ..models.models import TareaVinculo, Usuario
from ..schemas.tasks import normalize_vin
from . import ledger
from .areas import AreaTarget, area_for_table, resolve


logger = structlog.get_logger(__name__)

VIN_PATTERN = re.compile(r"^[A-Z0-9]{17}$")


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _get(row, name: str) -> Any:
    return row._mapping.get(name)


def checklist_snapshot(target: AreaTarget, row) -> Dict[str, bool]:
    return {name: bool(_get(row, name)) for name in target.checklist_fields}


def _latest_row(db: Session, target: AreaTarget, vin: str, state: Optional[str] = None):
    table = target.table
    query = select(table).where(table.c.vin == vin)
    if state is not None:
        query = query.where(table.c.state == state)
    return db.execute(query.order_by(table.c.id.desc()).limit(1)).first()


def vin_status(db: Session, area: str, vin: str) -> Dict[str, Any]:
    target = resolve(area)
    vin = normalize_vin(vin)
    row = _latest_row(db, target, vin) if vin else None
    if row is None:
        return {"status": "free"}
    state = _get(row, "state")
    if state == STATE_FINALIZED:
        return {"status": "finalized"}
    if state == STATE_PENDING:
        return {
            "status": "pending",
            "id": int(_get(row, "id")),
            "checks": checklist_snapshot(target, row),
        }
    return {"status": "free"}


def pending_by_vin(db: Session, area: str, vin: str, user_id: Optional[int] = None) -> Dict[str, Any]:
    """Latest pending record for a VIN; with user_id, only if that user is linked to it."""
    target = resolve(area)
    vin = normalize_vin(vin)
    row = _latest_row(db, target, vin, STATE_PENDING) if vin else None
    if row is None:
        return {"exists": False}
    record_id = int(_get(row, "id"))
    if user_id and user_id > 0 and not ledger.exists(db, user_id, target.table_name, record_id):
        return {"exists": False}
    return {
        "exists": True,
        "id": record_id,
        "bastidor": _get(row, "vin"),
        "color": _get(row, "color"),
        "RAL": _get(row, "paint_code"),
        "checks": checklist_snapshot(target, row),
    }


def snapshot(db: Session, area: str, record_id: int) -> Dict[str, Any]:
    target = resolve(area)
    table = target.table
    row = db.execute(select(table).where(table.c.id == record_id)).first()
    if row is None:
        raise NotFound(target.table_name, record_id)
    return {
        "exists": True,
        "id": int(_get(row, "id")),
        "estado": _get(row, "state"),
        "bastidor": _get(row, "vin"),
        "color": _get(row, "color"),
        "RAL": _get(row, "paint_code"),
        "fecha_inicio": _iso(_get(row, "start_time")),
        "fecha_fin": _iso(_get(row, "end_time")),
        "checks": checklist_snapshot(target, row),
    }


def finalized_exists(db: Session, area: str, vin: str) -> bool:
    target = resolve(area)
    vin = normalize_vin(vin)
    if not vin:
        return False
    table = target.table
    row = db.execute(
        select(table.c.id).where(table.c.vin == vin, table.c.state == STATE_FINALIZED).limit(1)
    ).first()
    return row is not None


def pending_for_user(db: Session, user_id: int) -> List[Dict[str, Any]]:
    """Pending records linked to a user across all areas, newest start first."""
    pending: List[Dict[str, Any]] = []
    seen = set()
    for table_name, record_id, _created in ledger.links_for_user(db, user_id, limit=settings.pending_link_limit):
        target = area_for_table(table_name)
        if target is None:
            continue
        key = (target.key, record_id)
        if key in seen:
            continue
        table = target.table
        row = db.execute(select(table).where(table.c.id == record_id)).first()
        if row is None or _get(row, "state") != STATE_PENDING:
            continue
        seen.add(key)
        checks = checklist_snapshot(target, row)
        pending.append(
            {
                "area": target.title,
                "area_key": target.key,
                "id": int(_get(row, "id")),
                "bastidor": _get(row, "vin"),
                "color": _get(row, "color"),
                "RAL": _get(row, "paint_code"),
                "fecha_inicio": _iso(_get(row, "start_time")),
                "total_checks": len(checks),
                "done_checks": sum(1 for done in checks.values() if done),
                "_start": _get(row, "start_time"),
            }
        )

    pending.sort(key=lambda p: (p["_start"] is not None, p["_start"] or datetime.min), reverse=True)
    for item in pending:
        del item["_start"]
    return pending


def _end_time_for(db: Session, table_name: Optional[str], record_id: Optional[int]) -> Optional[str]:
    target = area_for_table(table_name)
    if target is None or not record_id:
        return None
    table = target.table
    try:
        # Savepoint so a failed lookup does not abort the listing's transaction
        with db.begin_nested():
            value = db.execute(select(table.c.end_time).where(table.c.id == record_id)).scalar()
        return _iso(value)
    except Exception as e:
        logger.warning("end_time_lookup_failed", table=table_name, record_id=record_id, error=str(e))
        return None


def task_log(
    db: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    worker: Optional[str] = None,
    area: Optional[str] = None,
) -> List[Dict[str, Any]]:
    query = (
        db.query(
            TareaVinculo.id,
            TareaVinculo.fecha_creacion,
            Usuario.full_name,
            TareaVinculo.tabla_area,
            TareaVinculo.id_tarea_area,
        )
        .join(Usuario, Usuario.id == TareaVinculo.id_usuario)
        .order_by(TareaVinculo.id.desc())
    )
    if date_from is not None:
        query = query.filter(TareaVinculo.fecha_creacion >= date_from)
    if date_to is not None:
        query = query.filter(TareaVinculo.fecha_creacion <= date_to)
    worker = (worker or "").strip()
    if worker:
        query = query.filter(Usuario.full_name.ilike(f"%{worker}%"))
    if area and area.strip():
        try:
            target = resolve(area)
        except InvalidArea:
            # Unknown area filters are ignored
            target = None
        if target is not None:
            query = query.filter(TareaVinculo.tabla_area == target.table_name)

    out = []
    for link_id, created, worker_name, table_name, record_id in query.limit(settings.log_limit).all():
        target = area_for_table(table_name)
        out.append(
            {
                "id": int(link_id),
                "fecha": _iso(created),
                "fecha_fin": _end_time_for(db, table_name, record_id),
                "trabajador": worker_name or "",
                "area": target.title if target else "—",
                "accion": "Registro",
                "resultado": "OK",
            }
        )
    return out


def recent_distinct_values(
    db: Session,
    area: str,
    column: str,
    limit: int,
    normalize: Callable[[str], str] = lambda v: v.strip(),
    accept: Callable[[str], bool] = bool,
) -> List[str]:
    """Distinct non-empty values of a column over the latest `limit` rows, most recent first."""
    target = resolve(area)
    table = target.table
    col = table.c[column]
    rows = db.execute(
        select(col).where(col.is_not(None), col != "").order_by(table.c.id.desc()).limit(limit)
    ).all()
    values: List[str] = []
    seen = set()
    for (raw,) in rows:
        value = normalize(str(raw))
        if not accept(value) or value in seen:
            continue
        seen.add(value)
        values.append(value)
    return values


def available_vins(db: Session, area: str = "chasis") -> List[str]:
    return recent_distinct_values(
        db,
        area,
        "vin",
        settings.vin_list_limit,
        normalize=lambda v: v.strip().upper(),
        accept=lambda v: bool(VIN_PATTERN.match(v)),
    )


def paint_colors(db: Session) -> List[str]:
    return recent_distinct_values(db, "pintura", "color", settings.color_list_limit)


def color_by_vin(db: Session, vin: str) -> Dict[str, Optional[str]]:
    target = resolve("pintura")
    vin = normalize_vin(vin)
    row = _latest_row(db, target, vin) if vin else None
    if row is None:
        return {"color": None, "RAL": None}
    return {"color": _get(row, "color"), "RAL": _get(row, "paint_code")}
