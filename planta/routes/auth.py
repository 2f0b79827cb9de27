from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import structlog

from ..auth.security import check_credentials, create_access_token, get_password_hash
from ..db import get_db
from ..models.models import Usuario
from ..schemas.users import LoginRequest


router = APIRouter(tags=["auth"])
logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@router.post("/login")
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(Usuario).filter(Usuario.email == str(req.email).lower()).first()
    if not user:
        return _error(404, "Usuario no encontrado")

    ok, needs_rehash = check_credentials(req.password, user.password_hash)
    if not ok:
        return _error(401, "Contraseña incorrecta")
    if needs_rehash:
        user.password_hash = get_password_hash(req.password)
        db.commit()
        logger.info("legacy_password_rehashed", user_id=user.id)

    if not user.activo:
        return _error(403, "Usuario inactivo")

    return {
        "status": "success",
        "message": "Login correcto",
        "token": create_access_token(str(user.id), roles=[user.rol]),
        "user": {
            "id": user.id,
            "full_name": user.full_name,
            "email": user.email,
            "rol": user.rol,
        },
    }
