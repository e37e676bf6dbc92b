from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ledger.accounting.service import get_default_company_id
from ledger.auth import require_module
from ledger.chart_of_accounts import schemas
from ledger.db import get_db
from ledger.models import Account
from ledger.module_keys import ModuleKey

router = APIRouter(
    prefix="/api",
    tags=["chart-of-accounts"],
    dependencies=[Depends(require_module(ModuleKey.CHART_OF_ACCOUNTS.value))],
)

DEBIT_NORMAL_TYPES = {"ASSET", "EXPENSE", "COGS"}


def _normalize_type(account_type: Optional[str]) -> Optional[str]:
    if account_type is None:
        return None
    return account_type.upper()


def _serialize_account(account: Account) -> schemas.ChartAccountResponse:
    parent_summary = None
    if account.parent:
        parent_summary = schemas.AccountParentSummary(id=account.parent.id, name=account.parent.name, code=account.parent.code)
    return schemas.ChartAccountResponse(
        id=account.id,
        name=account.name,
        code=account.code,
        type=_normalize_type(account.type) or "OTHER",
        subtype=account.subtype,
        description=account.description,
        is_active=account.is_active,
        parent_account_id=account.parent_id,
        parent_account=parent_summary,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


@router.get("/chart-of-accounts", response_model=List[schemas.ChartAccountResponse])
def list_chart_of_accounts(
    type: Optional[schemas.AccountType] = None,
    active: Optional[bool] = True,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Account).options(selectinload(Account.parent))
    if type:
        query = query.filter(func.upper(Account.type) == _normalize_type(type))
    if active is not None:
        query = query.filter(Account.is_active.is_(active))
    if q:
        like = f"%{q}%"
        query = query.filter((Account.name.ilike(like)) | (Account.code.ilike(like)))

    accounts = query.order_by(Account.code.asc()).all()
    return [_serialize_account(account) for account in accounts]


@router.post("/chart-of-accounts", response_model=schemas.ChartAccountResponse, status_code=status.HTTP_201_CREATED)
def create_chart_account(payload: schemas.ChartAccountCreate, db: Session = Depends(get_db)):
    parent = None
    if payload.parent_account_id:
        parent = db.query(Account).filter(Account.id == payload.parent_account_id).first()
        if not parent:
            raise HTTPException(status_code=404, detail="Parent account not found.")

    account = Account(
        company_id=get_default_company_id(db),
        code=payload.code.strip(),
        name=payload.name,
        type=_normalize_type(payload.type),
        subtype=payload.subtype,
        description=payload.description,
        is_active=payload.is_active,
        parent_id=payload.parent_account_id,
        normal_balance="debit" if payload.type in DEBIT_NORMAL_TYPES else "credit",
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Account code already exists.") from None
    db.refresh(account)
    if parent:
        account.parent = parent
    return _serialize_account(account)


@router.get("/chart-of-accounts/{account_id}", response_model=schemas.ChartAccountResponse)
def get_chart_account(account_id: int, db: Session = Depends(get_db)):
    account = db.query(Account).options(selectinload(Account.parent)).filter(Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found.")
    return _serialize_account(account)
