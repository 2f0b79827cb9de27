from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import queries
from .responses import no_store


router = APIRouter(prefix="/busquedas", tags=["busquedas"])


@router.get("/tareas")
def task_log(
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
    trabajador: Optional[str] = Query(default=None),
    area: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    """
    Flat log of task registrations, newest first.

    Args:
        from / to: inclusive YYYY-MM-DD bounds on the registration date
        trabajador: case-insensitive substring of the worker's name
        area: pintura | chasis | premontaje | montaje (other values are ignored)
    """
    rows = queries.task_log(db, date_from=date_from, date_to=date_to, worker=trabajador, area=area)
    return no_store(rows)
