from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFound
from ..schemas.tasks import AreaUpdate, StartTaskRequest
from ..services import queries, task_service
from ..services.areas import resolve
from .responses import no_store


router = APIRouter(tags=["tareas"])


@router.post("/tareas/iniciar")
def start_task(req: StartTaskRequest, db: Session = Depends(get_db)):
    """
    Create a pending task for the area or resume the pending one for the same VIN.
    423 locked_by_other when that pending task belongs to someone else.
    """
    result = task_service.start_or_resume(
        db,
        user_id=req.usuario_id,
        area=req.area,
        vin=req.bastidor,
        color=req.color,
        paint_code=req.paint_code,
        checklist=req.checks,
    )
    return {"status": "success", "area": result.area, "id_area": result.record_id}


@router.get("/tareas/{area}/pendiente/{vin}")
def pending_by_vin(
    area: str,
    vin: str,
    user_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
):
    return no_store(queries.pending_by_vin(db, area, vin, user_id=user_id))


@router.get("/tareas/{area}/finalizado/{vin}")
def finalized_by_vin(area: str, vin: str, db: Session = Depends(get_db)):
    return no_store({"finalized": queries.finalized_exists(db, area, vin)})


@router.get("/tareas/{area}/{record_id}/snapshot")
def task_snapshot(area: str, record_id: int, db: Session = Depends(get_db)):
    try:
        return no_store(queries.snapshot(db, area, record_id))
    except NotFound:
        return no_store({"exists": False}, status_code=404)


@router.put("/tareas/{area}/{record_id}")
def update_task(
    area: str,
    record_id: int,
    payload: Dict[str, Any] = Body(default={}),
    db: Session = Depends(get_db),
):
    changes = AreaUpdate.from_payload(resolve(area), payload)
    status = task_service.update_fields(db, area, record_id, changes)
    return {"status": status}


@router.post("/tareas/{area}/{record_id}/finalizar")
def finalize_task(area: str, record_id: int, db: Session = Depends(get_db)):
    task_service.finalize(db, area, record_id)
    return {"status": "success"}


@router.post("/tareas/{area}/{record_id}/pendiente")
def reopen_task(area: str, record_id: int, db: Session = Depends(get_db)):
    task_service.reopen(db, area, record_id)
    return {"status": "success"}


@router.get("/pendientes/{usuario_id}")
def pending_for_user(usuario_id: int, db: Session = Depends(get_db)):
    return no_store(queries.pending_for_user(db, usuario_id))
