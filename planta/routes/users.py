from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import get_password_hash
from ..config import settings
from ..db import get_db
from ..errors import NotFound, ValidationError
from ..models.models import TareaVinculo, Usuario
from ..schemas.users import PasswordChange, UsuarioCreate, UsuarioUpdate


router = APIRouter(prefix="/usuarios", tags=["usuarios"])


def _user_to_dict(u: Usuario) -> dict:
    return {
        "id": u.id,
        "full_name": u.full_name,
        "email": u.email,
        "rol": u.rol,
        "activo": bool(u.activo),
        "fecha_alta": u.fecha_alta.isoformat() if isinstance(u.fecha_alta, datetime) else None,
    }


def _get_user(db: Session, user_id: int) -> Usuario:
    u = db.query(Usuario).filter(Usuario.id == user_id).first()
    if not u:
        raise NotFound("Usuario", user_id)
    return u


def _ensure_unique_email(db: Session, email: str, exclude_id: int = None) -> None:
    q = db.query(Usuario.id).filter(Usuario.email == email)
    if exclude_id is not None:
        q = q.filter(Usuario.id != exclude_id)
    if q.first():
        raise ValidationError("email", "El email ya está en uso")


@router.get("")
def list_users(db: Session = Depends(get_db)):
    return [_user_to_dict(u) for u in db.query(Usuario).order_by(Usuario.id.asc()).all()]


@router.post("", status_code=201)
def create_user(payload: UsuarioCreate, db: Session = Depends(get_db)):
    _ensure_unique_email(db, payload.email)
    u = Usuario(
        full_name=payload.full_name,
        email=payload.email,
        rol=payload.rol,
        activo=payload.activo,
        password_hash=get_password_hash(payload.password or settings.default_password),
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return {"status": "success", "message": "Usuario creado correctamente", "usuario": _user_to_dict(u)}


@router.put("/{user_id}")
def update_user(user_id: int, payload: UsuarioUpdate, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    _ensure_unique_email(db, payload.email, exclude_id=user_id)
    u.full_name = payload.full_name
    u.email = payload.email
    u.rol = payload.rol
    u.activo = payload.activo
    if payload.password:
        u.password_hash = get_password_hash(payload.password)
    db.commit()
    db.refresh(u)
    return {"status": "success", "message": "Usuario actualizado correctamente", "usuario": _user_to_dict(u)}


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    # Ledger links are append-only; a user with history can only be deactivated
    if db.query(TareaVinculo.id).filter(TareaVinculo.id_usuario == u.id).first():
        raise ValidationError("id", "El usuario tiene tareas registradas; desactívelo en su lugar")
    db.delete(u)
    db.commit()
    return {"status": "success", "message": "Usuario eliminado"}


@router.post("/{user_id}/reset-password")
def reset_password(user_id: int, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    u.password_hash = get_password_hash(settings.default_password)
    db.commit()
    return {"status": "success", "message": f"Contraseña restablecida a {settings.default_password}"}


@router.post("/{user_id}/change-password")
def change_password(user_id: int, payload: PasswordChange, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    u.password_hash = get_password_hash(payload.password)
    db.commit()
    return {"status": "success", "message": "Contraseña actualizada correctamente"}
