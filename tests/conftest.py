import os
import tempfile
from datetime import date

# Settings are cached on first use, so the test environment goes in before
# any project module is imported.
os.environ.setdefault("FINDASH_DATA_DIR", os.path.join(tempfile.gettempdir(), "findash-tests"))
os.environ.setdefault("FINDASH_DATABASE_URL", "sqlite://")
os.environ.setdefault("FINDASH_TIMEZONE", "UTC")
os.environ.setdefault("FINDASH_TOKEN_SECRET", "test-secret")
os.environ.setdefault("FINDASH_ESTIMATED_TAX_RATE", "0.30")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from auth import issue_token
from database import Base, get_db
from ledger import LedgerStore
from main import app
from models import TransactionType
from schemas import TransactionIn


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(session):
    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(owner_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(owner_id)}"}


def add_txn(
    session,
    owner_id: str,
    txn_type: TransactionType,
    amount: str,
    category: str,
    day: date,
    description=None,
):
    return LedgerStore(session).add(
        owner_id,
        TransactionIn(
            type=txn_type,
            amount=amount,
            category=category,
            description=description,
            date=day,
        ),
    )
