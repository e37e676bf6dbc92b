from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledger import seed
from ledger.db import Base
from ledger.models import Account, Company, Module


def _make_session_local():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)
    return TestingSessionLocal


def test_seed_is_idempotent_and_reconciles_existing_codes():
    TestingSessionLocal = _make_session_local()

    with TestingSessionLocal() as db:
        company = Company(name="Demo", base_currency="USD", fiscal_year_start_month=1)
        db.add(company)
        db.flush()
        db.add(Account(company_id=company.id, code="10100", name="Old Cash", type="OTHER", normal_balance="credit"))
        db.commit()

    with TestingSessionLocal() as db:
        inserted, updated = seed.seed_chart_of_accounts(db, 1)
        db.commit()
    assert updated == 1
    assert inserted == len(seed.DEFAULT_ACCOUNTS) - 1

    with TestingSessionLocal() as db:
        cash = db.query(Account).filter(Account.code == "10100").one()
        assert cash.name == "Cash - Regular Checking"
        assert cash.type == "ASSET"
        assert cash.normal_balance == "debit"

        inserted, updated = seed.seed_chart_of_accounts(db, 1)
        db.commit()
        assert inserted == 0
        assert db.query(Account).count() == len(seed.DEFAULT_ACCOUNTS)


def test_run_seed_creates_company_accounts_and_modules(monkeypatch):
    TestingSessionLocal = _make_session_local()
    monkeypatch.setattr(seed, "SessionLocal", TestingSessionLocal)

    seed.run_seed()
    seed.run_seed()

    with TestingSessionLocal() as db:
        assert db.query(Company).count() == 1
        assert db.query(Account).count() == len(seed.DEFAULT_ACCOUNTS)
        assert {module.key for module in db.query(Module).all()} == {"FINANCE", "CHART_OF_ACCOUNTS"}
