from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from magix.core.security import decode_access_token, verify_password
from magix.db.session import get_db
from magix.models.user import SesionRevocada, User, UserRole

reusable_oauth2 = OAuth2PasswordBearer(tokenUrl="/auth/login")

__all__ = [
    "authenticate",
    "client_info",
    "get_current_active_user",
    "get_current_user",
    "get_db",
    "get_token_payload",
    "require_role",
]


def authenticate(db: Session, *, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_token_payload(db: Session = Depends(get_db), token: str = Security(reusable_oauth2)) -> dict:
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido") from exc
    jti = payload.get("jti")
    if jti and db.query(SesionRevocada).filter(SesionRevocada.jti == jti).first():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sesión cerrada")
    return payload


def get_current_user(db: Session = Depends(get_db), payload: dict = Depends(get_token_payload)) -> User:
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido")
    user = db.get(User, int(user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario no encontrado")
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.activo:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cuenta deshabilitada")
    return current_user


def require_role(*roles: UserRole):
    def dependency(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permisos insuficientes")
        return current_user

    return dependency


def client_info(request: Request) -> dict:
    """ip / user-agent para el registro de auditoría."""
    return {
        "ip": request.client.host if request.client else None,
        "ua": (request.headers.get("user-agent") or "")[:255] or None,
    }
