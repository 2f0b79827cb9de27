from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFound
from ..models.models import TareaCatalogo
from ..schemas.catalog import CatalogoCreate, CatalogoUpdate, Proceso
from ..services.catalog import list_entries, serialize_entry
from .responses import no_store


router = APIRouter(prefix="/tareas", tags=["catalogo"])


@router.get("")
def list_catalog(proceso: Optional[Proceso] = None, activa: Optional[bool] = None, db: Session = Depends(get_db)):
    return no_store([serialize_entry(e) for e in list_entries(db, proceso=proceso, activa=activa)])


@router.post("", status_code=201)
def create_catalog_entry(payload: CatalogoCreate, db: Session = Depends(get_db)):
    entry = TareaCatalogo(**payload.model_dump())
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return {"status": "success", "tarea": serialize_entry(entry)}


@router.put("/{entry_id}")
def update_catalog_entry(entry_id: int, payload: CatalogoUpdate, db: Session = Depends(get_db)):
    # seccion is the only nullable column
    data = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "seccion"}
    if not data:
        return {"status": "noop"}
    entry = db.query(TareaCatalogo).filter(TareaCatalogo.id == entry_id).first()
    if not entry:
        raise NotFound("Tarea de catálogo", entry_id)
    for key, value in data.items():
        setattr(entry, key, value)
    db.commit()
    return {"status": "success"}


@router.delete("/{entry_id}")
def delete_catalog_entry(entry_id: int, db: Session = Depends(get_db)):
    entry = db.query(TareaCatalogo).filter(TareaCatalogo.id == entry_id).first()
    if not entry:
        raise NotFound("Tarea de catálogo", entry_id)
    db.delete(entry)
    db.commit()
    return {"status": "success"}
