from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from magix.api.deps import authenticate, client_info, get_current_active_user, get_db, get_token_payload
from magix.core.security import create_access_token, get_password_hash
from magix.models.audit import AuditEntity
from magix.models.user import SesionRevocada, User, UserRole
from magix.schemas.auth import LoginRequest, RegisterResponse, Token
from magix.schemas.user import UserCreate, UserRead
from magix.services.audit import record_audit

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, db: Session = Depends(get_db)) -> RegisterResponse:
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email ya registrado")
    user = User(
        email=payload.email,
        full_name=payload.full_name,
        password_hash=get_password_hash(payload.password),
        role=UserRole.USER,
        activo=True,
    )
    db.add(user)
    db.commit()
    return RegisterResponse(message="Usuario creado", created_at=datetime.utcnow())


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> Token:
    user = authenticate(db, email=payload.email, password=payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")
    if not user.activo:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cuenta deshabilitada")
    access_token = create_access_token(str(user.id), extra={"role": user.role.value})
    return Token(access_token=access_token)


@router.get("/me", response_model=UserRead)
def me(current_user=Depends(get_current_active_user)):
    return current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
) -> None:
    jti = payload.get("jti")
    if jti:
        db.add(SesionRevocada(jti=jti, user_id=current_user.id))
    record_audit(
        db,
        user_id=current_user.id,
        action="LOGOUT",
        entity=AuditEntity.USER,
        entity_id=current_user.id,
        summary={"jti": jti},
        **client_info(request),
    )
    db.commit()
