import json
import logging
import math
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ledger.accounting.posting import (
    ZERO,
    JournalEntryInput,
    JournalLineInput,
    compute_totals,
    validate_entry,
)
from ledger.config import ENTRY_NUMBER_PREFIX, ENTRY_NUMBER_START
from ledger.models import Account, AuditEvent, Company, JournalEntry, JournalLine
from ledger.utils.money import quantize_money

logger = logging.getLogger(__name__)

JOURNAL_ENTRY_STATUSES = ("pending", "approved", "posted", "void")


class JournalEntryNotFoundError(ValueError):
    pass


@dataclass
class JournalEntryPage:
    entries: list[JournalEntry]
    total: int
    pages: int
    pending_count: int
    total_debit: Decimal
    total_credit: Decimal


def get_default_company_id(db: Session) -> int:
    company = db.query(Company).order_by(Company.id.asc()).first()
    if company:
        return company.id

    company = Company(name="Demo Company", base_currency="USD", fiscal_year_start_month=1)
    db.add(company)
    db.flush()
    return company.id


def next_entry_number(db: Session) -> str:
    last_number = (
        db.query(JournalEntry.entry_number)
        .filter(JournalEntry.entry_number.like(f"{ENTRY_NUMBER_PREFIX}%"))
        .order_by(JournalEntry.id.desc())
        .first()
    )
    if not last_number:
        return f"{ENTRY_NUMBER_PREFIX}{ENTRY_NUMBER_START}"
    suffix = last_number[0][len(ENTRY_NUMBER_PREFIX):]
    try:
        return f"{ENTRY_NUMBER_PREFIX}{int(suffix) + 1}"
    except ValueError:
        return f"{ENTRY_NUMBER_PREFIX}{ENTRY_NUMBER_START}"


def _ensure_accounts_postable(db: Session, lines: list[JournalLineInput]) -> None:
    account_ids = {line.account_id for line in lines}
    accounts = db.query(Account).filter(Account.id.in_(account_ids)).all()
    found = {account.id: account for account in accounts}
    missing = sorted(account_id for account_id in account_ids if account_id not in found)
    if missing:
        raise ValueError(f"Account(s) not found: {', '.join(str(account_id) for account_id in missing)}.")
    inactive = sorted(account.code for account in accounts if not account.is_active)
    if inactive:
        raise ValueError(f"Cannot post to inactive account(s): {', '.join(inactive)}.")


def create_journal_entry(
    db: Session,
    *,
    company_id: int,
    entry: JournalEntryInput,
    user_id: Optional[int] = None,
) -> JournalEntry:
    """Validate and store a journal entry, assigning its entry number.

    Amounts are rounded to cents before the posting gates run, so the stored
    lines are exactly the ones that were checked. Raises ValueError
    (IncompleteEntryError, UnbalancedEntryError, or a plain ValueError for
    account problems). Flushes but does not commit.
    """
    rounded = replace(
        entry,
        lines=[
            replace(line, debit=quantize_money(line.debit) or ZERO, credit=quantize_money(line.credit) or ZERO)
            for line in entry.lines
        ],
    )
    entry = validate_entry(rounded)
    lines = entry.lines
    _ensure_accounts_postable(db, lines)
    totals = compute_totals(lines)

    record = JournalEntry(
        company_id=company_id,
        entry_number=next_entry_number(db),
        txn_date=entry.entry_date,
        memo=entry.memo,
        status="pending",
        total_debit=totals.total_debit,
        total_credit=totals.total_credit,
        created_by_user_id=user_id,
    )
    record.lines = [
        JournalLine(
            line_number=index,
            account_id=line.account_id,
            debit=line.debit,
            credit=line.credit,
            memo=line.memo,
        )
        for index, line in enumerate(lines, start=1)
    ]
    db.add(record)
    db.flush()
    logger.info(
        "Created journal entry %s with %s lines debit=%s credit=%s",
        record.entry_number,
        len(lines),
        totals.total_debit,
        totals.total_credit,
    )
    return get_journal_entry(db, record.id)


def get_journal_entry(db: Session, entry_id: int) -> Optional[JournalEntry]:
    return (
        db.query(JournalEntry)
        .options(selectinload(JournalEntry.lines).selectinload(JournalLine.account))
        .filter(JournalEntry.id == entry_id)
        .first()
    )


def list_journal_entries(
    db: Session,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> JournalEntryPage:
    query = db.query(JournalEntry)
    if status:
        query = query.filter(JournalEntry.status == status)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(JournalEntry.entry_number.ilike(like), JournalEntry.memo.ilike(like)))
    if date_from:
        query = query.filter(JournalEntry.txn_date >= date_from)
    if date_to:
        query = query.filter(JournalEntry.txn_date <= date_to)

    total = query.count()
    entries = (
        query.options(selectinload(JournalEntry.lines))
        .order_by(JournalEntry.txn_date.desc(), JournalEntry.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    pending_count = db.query(JournalEntry).filter(JournalEntry.status == "pending").count()
    total_debit, total_credit = db.query(
        func.coalesce(func.sum(JournalEntry.total_debit), 0),
        func.coalesce(func.sum(JournalEntry.total_credit), 0),
    ).one()

    return JournalEntryPage(
        entries=entries,
        total=total,
        pages=math.ceil(total / limit) if limit else 0,
        pending_count=pending_count,
        total_debit=quantize_money(total_debit),
        total_credit=quantize_money(total_credit),
    )


def update_journal_entry_status(
    db: Session,
    entry_id: int,
    status: str,
    *,
    user_id: Optional[int] = None,
) -> JournalEntry:
    if status not in JOURNAL_ENTRY_STATUSES:
        raise ValueError(f"Invalid journal entry status '{status}'.")
    entry = db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()
    if not entry:
        raise JournalEntryNotFoundError("Journal entry not found.")

    previous_status = entry.status
    entry.status = status
    db.add(
        AuditEvent(
            company_id=entry.company_id,
            user_id=user_id,
            entity_type="JournalEntry",
            entity_id=entry.id,
            action="update",
            event_metadata=json.dumps({"old_status": previous_status, "new_status": status}),
        )
    )
    db.flush()
    logger.info("Journal entry %s status %s -> %s", entry.entry_number, previous_status, status)
    return get_journal_entry(db, entry.id)
