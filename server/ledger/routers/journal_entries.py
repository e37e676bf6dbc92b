from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger.accounting import schemas
from ledger.accounting.posting import JournalEntryInput, JournalLineInput
from ledger.accounting.service import (
    JournalEntryNotFoundError,
    create_journal_entry,
    get_default_company_id,
    get_journal_entry,
    list_journal_entries,
    update_journal_entry_status,
)
from ledger.auth import require_module
from ledger.db import get_db
from ledger.models import JournalEntry, User
from ledger.module_keys import ModuleKey

router = APIRouter(prefix="/api/journal-entries", tags=["journal-entries"])

require_finance = require_module(ModuleKey.FINANCE.value)


def _to_response(entry: JournalEntry) -> schemas.JournalEntryResponse:
    return schemas.JournalEntryResponse(
        id=entry.id,
        entry_number=entry.entry_number,
        entry_date=entry.txn_date,
        memo=entry.memo,
        status=entry.status,
        total_debit=entry.total_debit,
        total_credit=entry.total_credit,
        created_at=entry.created_at,
        lines=[
            schemas.JournalLineResponse(
                id=line.id,
                line_number=line.line_number,
                account_id=line.account_id,
                account_code=line.account.code if line.account else None,
                account_name=line.account.name if line.account else None,
                debit=line.debit,
                credit=line.credit,
                memo=line.memo,
            )
            for line in entry.lines
        ],
    )


@router.post("", response_model=schemas.JournalEntryResponse, status_code=status.HTTP_201_CREATED)
def create_journal_entry_endpoint(
    payload: schemas.JournalEntryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_finance),
):
    entry = JournalEntryInput(
        entry_date=payload.entry_date,
        memo=payload.memo,
        lines=[
            JournalLineInput(account_id=line.account_id, debit=line.debit, credit=line.credit, memo=line.memo)
            for line in payload.lines
        ],
    )
    try:
        created = create_journal_entry(
            db,
            company_id=current_user.company_id or get_default_company_id(db),
            entry=entry,
            user_id=current_user.id,
        )
        db.commit()
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Journal entry number already exists. Please retry.") from None
    return _to_response(created)


@router.get("", response_model=schemas.JournalEntryListResponse, dependencies=[Depends(require_finance)])
def list_journal_entries_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    status: Optional[schemas.JournalEntryStatus] = Query(None),
    search: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    result = list_journal_entries(
        db,
        page=page,
        limit=limit,
        status=status,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    return schemas.JournalEntryListResponse(
        entries=[
            schemas.JournalEntryListRow(
                id=entry.id,
                entry_number=entry.entry_number,
                entry_date=entry.txn_date,
                memo=entry.memo,
                status=entry.status,
                total_debit=entry.total_debit,
                total_credit=entry.total_credit,
                line_count=len(entry.lines),
            )
            for entry in result.entries
        ],
        total=result.total,
        pages=result.pages,
        pending_count=result.pending_count,
        total_debit=result.total_debit,
        total_credit=result.total_credit,
    )


@router.get("/{entry_id}", response_model=schemas.JournalEntryResponse, dependencies=[Depends(require_finance)])
def get_journal_entry_endpoint(entry_id: int, db: Session = Depends(get_db)):
    entry = get_journal_entry(db, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found.")
    return _to_response(entry)


@router.patch("/{entry_id}/status", response_model=schemas.JournalEntryResponse)
def update_journal_entry_status_endpoint(
    entry_id: int,
    payload: schemas.JournalEntryStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_finance),
):
    try:
        entry = update_journal_entry_status(db, entry_id, payload.status, user_id=current_user.id)
    except JournalEntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    return _to_response(entry)
