import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, Optional, Protocol

from ledger.accounting.draft import JournalDraft
from ledger.accounting.posting import JournalEntryError, JournalEntryInput, validate_entry

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SubmissionError(JournalEntryError):
    """Raised by a store when it refuses or fails to persist an entry."""

    def __init__(self, detail: str, status_code: int | None = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


@dataclass(frozen=True)
class CreatedEntry:
    id: int
    entry_number: str


class JournalEntryStore(Protocol):
    def create_journal_entry(self, entry: JournalEntryInput) -> CreatedEntry:
        ...


@dataclass(frozen=True)
class SubmissionOutcome:
    status: Literal["accepted", "rejected", "ignored"]
    entry: Optional[CreatedEntry] = None
    error: Optional[JournalEntryError] = None

    @property
    def message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


class EntrySubmitter:
    """Gate a draft through validation and hand it to a store at most once at a time.

    Completeness and balance failures never reach the store. A store failure
    leaves the draft untouched and puts the submitter back into EDITING so the
    user can correct and retry.
    """

    def __init__(self, draft: JournalDraft, store: JournalEntryStore):
        self.draft = draft
        self.store = store
        self.state = SubmissionState.EDITING
        self.history: List[SubmissionState] = [SubmissionState.EDITING]
        self.created: Optional[CreatedEntry] = None
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self.state in {SubmissionState.VALIDATING, SubmissionState.SUBMITTING}

    def _transition(self, state: SubmissionState) -> None:
        self.state = state
        self.history.append(state)

    def submit(self) -> SubmissionOutcome:
        with self._lock:
            if self.in_flight:
                logger.debug("Ignoring submit while a journal entry submission is in flight")
                return SubmissionOutcome(status="ignored")
            if self.state == SubmissionState.ACCEPTED:
                logger.debug("Ignoring submit for already accepted entry %s", self.created.entry_number)
                return SubmissionOutcome(status="ignored", entry=self.created)
            self._transition(SubmissionState.VALIDATING)

        try:
            payload = validate_entry(self.draft.to_entry())
        except JournalEntryError as exc:
            logger.info("Journal entry rejected before submission: %s", exc)
            self._transition(SubmissionState.EDITING)
            return SubmissionOutcome(status="rejected", error=exc)

        self._transition(SubmissionState.SUBMITTING)
        try:
            created = self.store.create_journal_entry(payload)
        except SubmissionError as exc:
            logger.warning("Journal entry submission failed: %s", exc.detail)
            self._transition(SubmissionState.REJECTED)
            self._transition(SubmissionState.EDITING)
            return SubmissionOutcome(status="rejected", error=exc)
        except Exception:
            self._transition(SubmissionState.EDITING)
            raise

        self.created = created
        self._transition(SubmissionState.ACCEPTED)
        logger.info("Journal entry %s accepted (id=%s)", created.entry_number, created.id)
        return SubmissionOutcome(status="accepted", entry=created)
