import logging
from typing import Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger.accounting import service
from ledger.accounting.posting import JournalEntryInput
from ledger.accounting.submitter import CreatedEntry, SubmissionError

logger = logging.getLogger(__name__)


def entry_payload(entry: JournalEntryInput) -> dict:
    return {
        "entry_date": entry.entry_date.isoformat(),
        "memo": entry.memo,
        "lines": [
            {
                "account_id": line.account_id,
                "debit": str(line.debit),
                "credit": str(line.credit),
                "memo": line.memo,
            }
            for line in entry.lines
        ],
    }


class SessionJournalEntryStore:
    """Posts entries straight through a SQLAlchemy session and commits on success."""

    def __init__(self, db: Session, *, company_id: Optional[int] = None, user_id: Optional[int] = None):
        self.db = db
        self.company_id = company_id
        self.user_id = user_id

    def create_journal_entry(self, entry: JournalEntryInput) -> CreatedEntry:
        try:
            company_id = self.company_id or service.get_default_company_id(self.db)
            record = service.create_journal_entry(self.db, company_id=company_id, entry=entry, user_id=self.user_id)
            self.db.commit()
        except ValueError as exc:
            self.db.rollback()
            raise SubmissionError(str(exc)) from exc
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Journal entry insert conflicted: %s", exc.orig)
            raise SubmissionError("Journal entry number already exists. Please retry.") from exc
        return CreatedEntry(id=record.id, entry_number=record.entry_number)


class HttpJournalEntryStore:
    """Posts entries to the journal entries API."""

    def __init__(self, client: httpx.Client, *, path: str = "/api/journal-entries"):
        self.client = client
        self.path = path

    def create_journal_entry(self, entry: JournalEntryInput) -> CreatedEntry:
        try:
            response = self.client.post(self.path, json=entry_payload(entry))
        except httpx.HTTPError as exc:
            logger.warning("Journal entry request to %s failed: %s", self.path, exc)
            raise SubmissionError(f"Unable to reach the journal entry service: {exc}") from exc

        if response.is_error:
            raise SubmissionError(_error_detail(response), status_code=response.status_code)
        data = response.json()
        return CreatedEntry(id=data["id"], entry_number=data["entry_number"])


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        detail = "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail)
    return detail or f"Journal entry request failed with status {response.status_code}."
