import os
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("BUDGET_DATABASE_URL", "sqlite://")
os.environ.setdefault("BUDGET_AUTO_CREATE_SCHEMA", "0")

from database import Base, build_engine  # noqa: E402
from main import app, get_db, get_today  # noqa: E402

PINNED_TODAY = date(2024, 12, 18)


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: PINNED_TODAY
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
