import hmac
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext
try:
    import bcrypt as _bcrypt
except Exception:
    _bcrypt = None

from ..config import settings


pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def get_password_hash(password: str) -> str:
    # Use pbkdf2_sha256 to avoid native bcrypt backend issues
    return pwd_context.hash(password)


def is_hashed(stored: str) -> bool:
    return stored.startswith(_BCRYPT_PREFIXES) or pwd_context.identify(stored) is not None


def verify_password(plain: str, hashed: str) -> bool:
    # Legacy bcrypt hashes ($2a$/$2b$/$2y$) are checked with the bcrypt module directly
    if hashed.startswith(_BCRYPT_PREFIXES):
        if not _bcrypt:
            return False
        pb = plain.encode("utf-8")
        if len(pb) > 72:
            pb = pb[:72]
        try:
            return _bcrypt.checkpw(pb, hashed.encode("utf-8"))
        except ValueError:
            return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def check_credentials(plain: str, stored: str) -> tuple[bool, bool]:
    """
    Returns (ok, needs_rehash). Rows imported from the old system may still
    hold the password in clear text; those match by constant-time comparison
    and must be re-hashed by the caller.
    """
    stored = stored or ""
    if is_hashed(stored):
        return verify_password(plain, stored), False
    ok = bool(stored) and hmac.compare_digest(stored.encode("utf-8"), plain.encode("utf-8"))
    return ok, ok


def create_access_token(user_id: str, roles: Optional[list] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.jwt_ttl_seconds)).timestamp()),
        "jti": str(uuid.uuid4()),
        "roles": roles or [],
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
