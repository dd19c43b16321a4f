"""initial schema"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("ADMIN", "USER", name="userrole"), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "sesiones_revocadas",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("jti", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("revocada_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sesiones_revocadas_jti"), "sesiones_revocadas", ["jti"], unique=True)

    op.create_table(
        "registros",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("fecha", sa.Date(), nullable=False),
        sa.Column("beo", sa.String(length=60), nullable=False),
        sa.Column("salon", sa.String(length=120), nullable=False),
        sa.Column("compania", sa.String(length=160), nullable=False),
        sa.Column("item", sa.String(length=250), nullable=False),
        sa.Column(
            "tipo",
            sa.Enum("Venta", "SubArriendo", "Estándar", "Adicional", name="tipo_registro"),
            nullable=False,
        ),
        sa.Column("valor", sa.Numeric(14, 2), nullable=False),
        sa.Column("cantidad", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(18, 4), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_registros_user_id"), "registros", ["user_id"], unique=False)
    op.create_index(op.f("ix_registros_fecha"), "registros", ["fecha"], unique=False)

    op.create_table(
        "articulos",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("codigo_articulo", sa.String(length=60), nullable=False),
        sa.Column("grupo", sa.String(length=120), nullable=False),
        sa.Column("subgrupo", sa.String(length=120), nullable=False),
        sa.Column("descripcion", sa.String(length=500), nullable=False),
        sa.Column("en_stock", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "codigo_articulo", name="uq_articulo_codigo"),
    )
    op.create_index(op.f("ix_articulos_user_id"), "articulos", ["user_id"], unique=False)

    op.create_table(
        "reservas",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("articulo_id", sa.Integer(), nullable=False),
        sa.Column("evento_key", sa.String(length=400), nullable=False),
        sa.Column("cantidad_reservada", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["articulo_id"], ["articulos.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_reservas_user_id"), "reservas", ["user_id"], unique=False)
    op.create_index(op.f("ix_reservas_articulo_id"), "reservas", ["articulo_id"], unique=False)
    op.create_index(op.f("ix_reservas_evento_key"), "reservas", ["evento_key"], unique=False)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("summary", sa.String(length=500), nullable=False),
        sa.Column("ip", sa.String(length=50), nullable=True),
        sa.Column("ua", sa.String(length=255), nullable=True),
        sa.Column("hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_entity", "audit_log", ["entity", "entity_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_log_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index(op.f("ix_reservas_evento_key"), table_name="reservas")
    op.drop_index(op.f("ix_reservas_articulo_id"), table_name="reservas")
    op.drop_index(op.f("ix_reservas_user_id"), table_name="reservas")
    op.drop_table("reservas")
    op.drop_index(op.f("ix_articulos_user_id"), table_name="articulos")
    op.drop_table("articulos")
    op.drop_index(op.f("ix_registros_fecha"), table_name="registros")
    op.drop_index(op.f("ix_registros_user_id"), table_name="registros")
    op.drop_table("registros")
    op.drop_index(op.f("ix_sesiones_revocadas_jti"), table_name="sesiones_revocadas")
    op.drop_table("sesiones_revocadas")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
    sa.Enum(name="tipo_registro").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
