import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "testsecret")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ.setdefault("RATE_LIMIT", "10000/minute")
os.environ.setdefault("IVA_RATE", "0.19")
os.environ.setdefault("ASISTENTE_URL", "http://asistente.test/v1/generate")
os.environ.setdefault("ASISTENTE_API_KEY", "test-key")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "Admin1234!")

from magix.main import app  # noqa: E402
from magix.db.session import SessionLocal, engine, get_db  # noqa: E402
from magix.models.base import Base  # noqa: E402
from magix.seed.seed_data import get_or_create_admin  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def prepare_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        get_or_create_admin(session)
    yield
    Base.metadata.drop_all(bind=engine)


def override_get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
