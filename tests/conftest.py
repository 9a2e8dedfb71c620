"""
Pytest configuration: in-memory SQLite, temporary uploads dir, API client
and small factories for accounts and published listings.
"""
import os
import tempfile

# Must be set before rishta is imported (settings are read at import time)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="rishta-uploads-")
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from datetime import datetime
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rishta.core.packages import Tier
from rishta.db.base import Base
from rishta.db.session import get_db
from rishta.main import app
from rishta.models import Account, Gender, Role
from rishta.services.approval import approve
from rishta.utils.auth import create_account_token, hash_password

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)

_emails = count(1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_account(db, **overrides) -> Account:
    """Persist a pending user account; any column can be overridden."""
    n = next(_emails)
    fields = {
        "name": f"User {n}",
        "father_name": f"Father {n}",
        "email": f"user{n}@example.com",
        "phone": f"0300-00000{n:02d}",
        "hashed_password": PASSWORD_HASH,
        "role": Role.USER,
        "age": 28,
        "gender": Gender.MALE,
        "city": "Lahore",
        "caste": "Rajput",
        "occupation": "Engineer",
        "income": "150000",
        "family_details": "Two brothers, one sister",
        "package": Tier.STANDARD,
        "payment_screenshot": f"http://testserver/uploads/payments/pay{n}.png",
        "images": [f"http://testserver/uploads/images/img{n}.jpg"],
        "main_image": f"http://testserver/uploads/images/img{n}.jpg",
        "credits": 0,
        "is_approved": False,
        "is_active": True,
    }
    fields.update(overrides)
    account = Account(**fields)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def make_admin(db, **overrides) -> Account:
    overrides.setdefault("role", Role.ADMIN)
    overrides.setdefault("name", "System Admin")
    return make_account(db, **overrides)


def make_member(db, tier=Tier.BASIC, now=None, **overrides):
    """An approved account with its published listing: returns (account, listing)."""
    account = make_account(db, **overrides)
    result = approve(db, account.id, tier, now=now or datetime.utcnow())
    return result.account, result.listing


def auth_headers(account: Account) -> dict:
    return {"Authorization": f"Bearer {create_account_token(account.id, account.role.value)}"}
