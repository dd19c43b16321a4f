from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from magix.core.config import settings
from magix.core.security import get_password_hash
from magix.db.session import SessionLocal
from magix.models.articulo import Articulo
from magix.models.registro import Registro, TipoRegistro
from magix.models.user import User, UserRole


def get_or_create_admin(db: Session) -> User:
    admin = db.query(User).filter(User.email == settings.admin_email).first()
    if admin:
        return admin
    admin = User(
        email=settings.admin_email,
        full_name="Administrador",
        password_hash=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        activo=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def seed_demo(db: Session, user: User) -> None:
    """Registros y artículos de ejemplo para el usuario; no hace nada si ya tiene datos."""
    if db.query(Registro).filter(Registro.user_id == user.id).count() > 0:
        return
    hoy = date.today()
    eventos = [
        (hoy - timedelta(days=40), "Salón Imperial", "Banco Andino", "BEO-1001"),
        (hoy - timedelta(days=12), "Salón Imperial", "Minera del Sur", "BEO-1002"),
        (hoy - timedelta(days=5), "Terraza", "Banco Andino", "BEO-1003"),
    ]
    items = [
        ("Iluminación escenario", TipoRegistro.VENTA, Decimal("350000"), Decimal("1")),
        ("Sonido ambiental", TipoRegistro.ESTANDAR, Decimal("120000"), Decimal("2")),
        ("Iluminación LED arriendo", TipoRegistro.SUBARRIENDO, Decimal("90000"), Decimal("3")),
        ("Pantalla LED", TipoRegistro.ADICIONAL, Decimal("210000"), Decimal("1")),
    ]
    for fecha, salon, compania, beo in eventos:
        for item, tipo, valor, cantidad in items:
            db.add(
                Registro(
                    user_id=user.id,
                    fecha=fecha,
                    beo=beo,
                    salon=salon,
                    compania=compania,
                    item=item,
                    tipo=tipo,
                    valor=valor,
                    cantidad=cantidad,
                    total=valor * cantidad,
                )
            )

    articulos = [
        ("ILU-001", "Iluminación", "Robótica", "Cabeza móvil beam 230W", 24),
        ("ILU-002", "Iluminación", "Par LED", "Par LED RGBW 18x10W", 60),
        ("SON-001", "Sonido", "Parlantes", "Line array activo", 8),
        ("VID-001", "Video", "Pantallas", "Módulo pantalla LED P3.9", 40),
    ]
    for codigo, grupo, subgrupo, descripcion, en_stock in articulos:
        db.add(
            Articulo(
                user_id=user.id,
                codigo_articulo=codigo,
                grupo=grupo,
                subgrupo=subgrupo,
                descripcion=descripcion,
                en_stock=en_stock,
            )
        )
    db.commit()


if __name__ == "__main__":
    with SessionLocal() as session:
        admin = get_or_create_admin(session)
        seed_demo(session, admin)
