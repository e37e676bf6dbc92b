import logging
import os

from sqlalchemy.orm import Session

from .auth import seed_modules
from .db import SessionLocal
from .models import Account, Company, User

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    ("10100", "Cash - Regular Checking", "ASSET"),
    ("10600", "Petty Cash Fund", "ASSET"),
    ("12100", "Accounts Receivable", "ASSET"),
    ("13100", "Inventory", "ASSET"),
    ("15300", "Prepaid Insurance", "ASSET"),
    ("17300", "Equipment", "ASSET"),
    ("18300", "Accumulated Depreciation - Equipment", "ASSET"),
    ("21000", "Accounts Payable", "LIABILITY"),
    ("22100", "Wages Payable", "LIABILITY"),
    ("24500", "Unearned Revenues", "LIABILITY"),
    ("27100", "Common Stock, No Par", "EQUITY"),
    ("27500", "Retained Earnings", "EQUITY"),
    ("31010", "Sales", "INCOME"),
    ("41010", "Cost of Goods Sold", "COGS"),
    ("50100", "Salaries Expense", "EXPENSE"),
    ("50200", "Supplies Expense", "EXPENSE"),
    ("50600", "Telephone Expense", "EXPENSE"),
    ("91800", "Gain on Sale of Assets", "OTHER"),
]


def _normal_balance(account_type: str) -> str:
    return "debit" if account_type in {"ASSET", "EXPENSE", "COGS"} else "credit"


def _get_or_create_company(db: Session) -> Company:
    company = db.query(Company).order_by(Company.id.asc()).first()
    if company:
        return company

    company = Company(name="Demo Company", base_currency="USD", fiscal_year_start_month=1)
    db.add(company)
    db.flush()
    return company


def _get_or_create_admin(db: Session, company_id: int) -> User:
    user = db.query(User).filter(User.email == "admin@ledger.local").first()
    if user:
        user.is_admin = True
        user.is_active = True
        return user

    user = User(company_id=company_id, email="admin@ledger.local", full_name="System Admin", role="admin", is_admin=True)
    db.add(user)
    db.flush()
    return user


def seed_chart_of_accounts(db: Session, company_id: int) -> tuple[int, int]:
    inserted = 0
    updated = 0
    for code, name, account_type in DEFAULT_ACCOUNTS:
        account = db.query(Account).filter(Account.code == code).first()
        if account:
            account.name = name
            account.type = account_type
            account.normal_balance = _normal_balance(account_type)
            updated += 1
            continue
        db.add(
            Account(
                company_id=company_id,
                code=code,
                name=name,
                type=account_type,
                is_active=True,
                normal_balance=_normal_balance(account_type),
            )
        )
        inserted += 1
    db.flush()
    return inserted, updated


def run_seed():
    db: Session = SessionLocal()
    try:
        company = _get_or_create_company(db)
        if os.getenv("SEED_SKIP_AUTH", "1") not in {"1", "true", "TRUE", "yes", "YES"}:
            _get_or_create_admin(db, company.id)
        inserted, updated = seed_chart_of_accounts(db, company.id)
        seed_modules(db)
        db.commit()
        logger.info("Seeded chart of accounts: inserted=%s updated=%s", inserted, updated)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_seed()
