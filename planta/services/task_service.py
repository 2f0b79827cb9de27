from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..errors import LockedByOther, NotFound, ValidationError
from ..models.areas import STATE_FINALIZED, STATE_PENDING
from ..models.models import Usuario, utcnow
from ..schemas.tasks import AreaUpdate, clean_text, normalize_vin
from . import ledger
from .areas import AreaTarget, resolve
from .checklist import coerce_flag, normalize_label
from .locks import vin_locks


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StartResult:
    area: str
    record_id: int
    created: bool


def _require_active_user(db: Session, user_id: int) -> Usuario:
    user = db.query(Usuario).filter(Usuario.id == user_id).first()
    if user is None:
        raise ValidationError("usuario_id", "El usuario no existe")
    if not user.activo:
        raise ValidationError("usuario_id", "Usuario inactivo")
    return user


def find_pending_candidate(db: Session, target: AreaTarget, vin: str) -> Optional[int]:
    """Latest pending record for this VIN; highest id wins."""
    table = target.table
    row = db.execute(
        select(table.c.id)
        .where(table.c.vin == vin, table.c.state == STATE_PENDING)
        .order_by(table.c.id.desc())
        .limit(1)
    ).first()
    return int(row[0]) if row else None


def build_start_fields(
    target: AreaTarget,
    *,
    vin: Optional[str],
    color: Optional[str],
    paint_code: Optional[str],
    checklist: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"state": STATE_PENDING, "end_time": None}
    for column, value in (("vin", vin), ("color", color), ("paint_code", paint_code)):
        if value is None:
            continue
        if target.has_column(column):
            fields[column] = value
        else:
            logger.debug("start_field_dropped", area=target.key, column=column)
    for label, value in (checklist or {}).items():
        if not isinstance(label, str):
            continue
        name = normalize_label(label)
        if name in target.checklist_fields:
            fields[name] = coerce_flag(value)
    return fields


def start_or_resume(
    db: Session,
    *,
    user_id: int,
    area: str,
    vin: Optional[str] = None,
    color: Optional[str] = None,
    paint_code: Optional[str] = None,
    checklist: Optional[Dict[str, Any]] = None,
) -> StartResult:
    """
    Start a task for a VIN in an area, or resume the pending one.

    A pending record for the same VIN is resumed only by its owner (the
    earliest ledger link); anyone else gets LockedByOther and nothing is
    written. The lookup and the write run under a per-(table, VIN) lock and
    commit before the lock is released.
    """
    target = resolve(area)
    _require_active_user(db, user_id)
    # Candidate lookup must run in a transaction opened after the lock is taken
    db.commit()

    vin = normalize_vin(vin)
    color = clean_text(color)
    paint_code = clean_text(paint_code)

    guard = vin_locks.hold((target.table_name, vin)) if vin else nullcontext()
    with guard:
        try:
            candidate = find_pending_candidate(db, target, vin) if vin else None
            if candidate is not None:
                owner_id = ledger.owner_of(db, target.table_name, candidate)
                if owner_id is not None and owner_id != user_id:
                    logger.info(
                        "task_locked_by_other",
                        area=target.key,
                        record_id=candidate,
                        owner_id=owner_id,
                        user_id=user_id,
                    )
                    raise LockedByOther(target.key, candidate, owner_id)

            fields = build_start_fields(target, vin=vin, color=color, paint_code=paint_code, checklist=checklist)
            table = target.table
            now = utcnow()
            if candidate is not None:
                db.execute(update(table).where(table.c.id == candidate).values(**fields))
                record_id = candidate
            else:
                result = db.execute(table.insert().values(start_time=now, **fields))
                record_id = int(result.inserted_primary_key[0])

            ledger.append_if_absent(db, user_id, target.table_name, record_id, now.date())
            db.commit()
        except Exception:
            db.rollback()
            raise

    created = candidate is None
    logger.info(
        "task_created" if created else "task_resumed",
        area=target.key,
        record_id=record_id,
        user_id=user_id,
        vin=vin,
    )
    return StartResult(area=target.key, record_id=record_id, created=created)


def _update_record(db: Session, target: AreaTarget, record_id: int, values: Dict[str, Any]) -> None:
    table = target.table
    try:
        result = db.execute(update(table).where(table.c.id == record_id).values(**values))
        if result.rowcount == 0:
            raise NotFound(target.table_name, record_id)
        db.commit()
    except Exception:
        db.rollback()
        raise


def update_fields(db: Session, area: str, record_id: int, changes: AreaUpdate) -> str:
    """Partial update of reserved text fields and checklist flags. Empty -> 'noop'."""
    target = resolve(area)
    if changes.is_empty():
        return "noop"
    values = changes.to_columns()
    _update_record(db, target, record_id, values)
    logger.info("task_fields_updated", area=target.key, record_id=record_id, fields=sorted(values))
    return "success"


def finalize(db: Session, area: str, record_id: int) -> None:
    target = resolve(area)
    _update_record(db, target, record_id, {"state": STATE_FINALIZED, "end_time": utcnow()})
    logger.info("task_finalized", area=target.key, record_id=record_id)


def reopen(db: Session, area: str, record_id: int) -> None:
    target = resolve(area)
    _update_record(db, target, record_id, {"state": STATE_PENDING, "end_time": None})
    logger.info("task_reopened", area=target.key, record_id=record_id)
