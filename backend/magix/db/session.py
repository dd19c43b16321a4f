# db/session.py
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from magix.core.config import settings


def _connect_args(url: str) -> dict:
    # SQLite (tests / uso local) comparte la conexión entre hilos del TestClient
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {"application_name": "magix_api", "connect_timeout": 10}


engine = create_engine(
    settings.database_url,
    future=True,
    echo=False,
    pool_pre_ping=True,     # evita conexiones muertas
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
