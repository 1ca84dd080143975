import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cashdrawer.db import get_db
from cashdrawer.main import app
from cashdrawer.models import Base, DenominationType, Register


# (name, value_cents, kind, sort_order); ids follow insertion order
CATALOG = [
    ("5000 Note", 500000, "note", 1),
    ("1000 Note", 100000, "note", 2),
    ("500 Note", 50000, "note", 3),
    ("1 Coin", 100, "coin", 4),
]


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSession()
    for name, cents, kind, sort in CATALOG:
        db.add(DenominationType(name=name, value_cents=cents, kind=kind, sort_order=sort, is_active=True))
    db.add(Register(name="Front Till", branch_id=1, is_active=True))
    db.commit()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def denomination_ids(db_session):
    rows = db_session.query(DenominationType).order_by(DenominationType.sort_order).all()
    return {r.name: r.id for r in rows}


@pytest.fixture
def register_id(db_session):
    return db_session.query(Register).filter_by(name="Front Till").one().id
