from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from ..models.models import TareaCatalogo
from .areas import all_areas


logger = structlog.get_logger(__name__)


def list_entries(db: Session, proceso: Optional[str] = None, activa: Optional[bool] = None) -> List[TareaCatalogo]:
    q = db.query(TareaCatalogo)
    if proceso:
        q = q.filter(TareaCatalogo.proceso == proceso)
    if activa is not None:
        q = q.filter(TareaCatalogo.activa.is_(activa))
    return q.order_by(TareaCatalogo.proceso, TareaCatalogo.seccion, TareaCatalogo.label).all()


def seed_catalog_from_areas(db: Session) -> int:
    """Add one active catalog entry per checklist item that is not catalogued yet."""
    created = 0
    for target in all_areas():
        for field in target.checklist:
            exists = (
                db.query(TareaCatalogo.id)
                .filter(TareaCatalogo.proceso == target.key, TareaCatalogo.label == field.display_label)
                .first()
            )
            if exists:
                continue
            db.add(TareaCatalogo(proceso=target.key, seccion=None, label=field.display_label, activa=True))
            created += 1
    db.commit()
    logger.info("catalog_seeded", created=created)
    return created


def serialize_entry(entry: TareaCatalogo) -> dict:
    return {
        "id": entry.id,
        "proceso": entry.proceso,
        "seccion": entry.seccion,
        "label": entry.label,
        "activa": bool(entry.activa),
    }
