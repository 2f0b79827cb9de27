from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import queries
from .responses import no_store


router = APIRouter(tags=["estaciones"])


@router.get("/chasis/vin-estado/{vin}")
def chassis_vin_status(vin: str, db: Session = Depends(get_db)):
    return no_store(queries.vin_status(db, "chasis", vin))


@router.get("/chasis/bastidores")
def chassis_vins(db: Session = Depends(get_db)):
    return no_store(queries.available_vins(db, "chasis"))


@router.get("/pintura/colores")
def paint_colors(db: Session = Depends(get_db)):
    return no_store(queries.paint_colors(db))


@router.get("/pintura/color-por-vin/{vin}")
def paint_color_by_vin(vin: str, db: Session = Depends(get_db)):
    return no_store(queries.color_by_vin(db, vin))


@router.get("/montaje/vin-disponible/{vin}")
def assembly_vin_available(vin: str, db: Session = Depends(get_db)):
    """A VIN already finalized in assembly cannot be assembled again."""
    return no_store({"available": not queries.finalized_exists(db, "montaje", vin)})
