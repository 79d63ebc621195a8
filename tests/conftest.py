"""
Test configuration and fixtures for the LeadDesk API.

DATABASE_URL is pointed at a throwaway SQLite file before anything from
the app is imported, and the schema is rebuilt for every test.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from io import BytesIO
from typing import Generator
from zipfile import ZipFile

from dotenv import load_dotenv

load_dotenv()

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from app.features.auth.models.user import User
from app.features.auth.utils.auth import get_current_admin, get_current_user
from app.features.referral.models.referral import ReferralEntry
from app.platform.db.models import Base
from app.platform.db.session import SessionLocal

sync_engine = create_engine(f"sqlite:///{test_db_path}")


@pytest.fixture(autouse=True)
def reset_database():
    """Fresh tables for every test."""
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)
    yield


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def db_session():
    async with SessionLocal() as session:
        yield session


def create_user(**overrides) -> User:
    """Insert a user synchronously and return it detached."""
    values = {
        "email": "owner@example.com",
        "name": "Owner",
        "is_admin": False,
        "subscription_status": "inactive",
        "total_referrals": 0,
        "active_referrals": 0,
        "total_earnings": 0,
    }
    values.update(overrides)
    with Session(sync_engine, expire_on_commit=False) as session:
        user = User(**values)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    return user


@pytest.fixture
def user_factory():
    return create_user


@pytest.fixture
def admin_user() -> User:
    return create_user(email="admin@example.com", name="Admin", is_admin=True)


@pytest.fixture
def subscriber() -> User:
    return create_user(
        email="ada@example.com",
        name="Ada Lovelace",
        referral_code="9F2C41A7B0DE",
        subscription_status="active",
        subscription_end_date=datetime.now(timezone.utc) + timedelta(days=30),
    )


@pytest.fixture
def admin_client(test_app, client, admin_user):
    """Client with get_current_admin overridden to return admin_user."""
    test_app.dependency_overrides[get_current_admin] = lambda: admin_user
    yield client
    test_app.dependency_overrides.pop(get_current_admin, None)


@pytest.fixture
def auth_client(test_app, client, subscriber):
    """Client with get_current_user overridden to return the subscriber."""
    test_app.dependency_overrides[get_current_user] = lambda: subscriber
    yield client
    test_app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def make_workbook():
    """Build an .xlsx file in memory from a header row and data rows."""

    def _make(headers, rows, sheet_title="Leads") -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_title
        sheet.append(list(headers))
        for row in rows:
            sheet.append(list(row))
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make


@pytest.fixture
def truncated_workbook(make_workbook):
    """An .xlsx whose first sheet XML is cut off halfway."""
    original = make_workbook(["id", "name", "email"], [[1, "Alice", "alice@x.com"]])
    buffer = BytesIO()
    with ZipFile(BytesIO(original)) as source, ZipFile(buffer, "w") as target:
        for item in source.infolist():
            data = source.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = data[: len(data) // 2]
            target.writestr(item, data)
    return buffer.getvalue()


@pytest.fixture
def add_referral():
    """Attach a referred user to a referrer, as sign-up would."""

    def _add(referrer: User, referred: User, **values) -> None:
        with Session(sync_engine) as session:
            session.add(ReferralEntry(referrer_id=referrer.id, referred_user_id=referred.id, **values))
            session.commit()

    return _add
