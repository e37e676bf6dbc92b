from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledger.auth import get_current_user
from ledger.config import ALGORITHM, SECRET_KEY
from ledger.db import Base, get_db
from ledger.main import app
from ledger.models import Account, Company, User


@pytest.fixture(autouse=True)
def override_auth(request):
    if request.node.get_closest_marker("real_auth"):
        yield
        return

    app.dependency_overrides[get_current_user] = lambda: User(
        id=1,
        company_id=1,
        email="admin@ledger.local",
        full_name="Test Admin",
        is_admin=True,
        is_active=True,
        role="admin",
    )
    yield
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def session_local():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)

    with TestingSessionLocal() as db:
        company = Company(name="Demo", base_currency="USD", fiscal_year_start_month=1)
        db.add(company)
        db.flush()
        db.add_all(
            [
                Account(company_id=company.id, code="10100", name="Cash", type="ASSET", normal_balance="debit"),
                Account(company_id=company.id, code="21000", name="Accounts Payable", type="LIABILITY", normal_balance="credit"),
                Account(company_id=company.id, code="31010", name="Sales", type="INCOME", normal_balance="credit"),
                Account(
                    company_id=company.id,
                    code="50200",
                    name="Supplies Expense",
                    type="EXPENSE",
                    normal_balance="debit",
                ),
                Account(
                    company_id=company.id,
                    code="99999",
                    name="Retired Clearing",
                    type="OTHER",
                    normal_balance="credit",
                    is_active=False,
                ),
            ]
        )
        db.commit()

    yield TestingSessionLocal
    Base.metadata.drop_all(engine)


@pytest.fixture()
def accounts(session_local) -> dict[str, int]:
    with session_local() as db:
        return {account.code: account.id for account in db.query(Account).all()}


@pytest.fixture()
def client(session_local):
    def override_get_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def bearer_headers():
    def make(user_id: int) -> dict[str, str]:
        expire = datetime.now(timezone.utc) + timedelta(minutes=5)
        token = jwt.encode({"sub": str(user_id), "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)
        return {"Authorization": f"Bearer {token}"}

    return make
