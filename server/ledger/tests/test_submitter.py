import threading
from datetime import date
from decimal import Decimal

import pytest

from ledger.accounting.draft import JournalDraft
from ledger.accounting.posting import IncompleteEntryError, UnbalancedEntryError
from ledger.accounting.submitter import (
    CreatedEntry,
    EntrySubmitter,
    SubmissionError,
    SubmissionState,
)


class RecordingStore:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    def create_journal_entry(self, entry):
        self.calls.append(entry)
        if self.error is not None:
            raise self.error
        return CreatedEntry(id=len(self.calls), entry_number=f"JE-{10000 + len(self.calls)}")


def _balanced_draft() -> JournalDraft:
    draft = JournalDraft(entry_date=date(2026, 4, 30), memo="April rent")
    first, second = (line.line_id for line in draft.lines)
    draft.set_account(first, 11)
    draft.set_debit(first, "1200")
    draft.set_account(second, 22)
    draft.set_credit(second, "1200")
    return draft


def test_balanced_draft_is_accepted():
    store = RecordingStore()
    submitter = EntrySubmitter(_balanced_draft(), store)

    outcome = submitter.submit()

    assert outcome.status == "accepted"
    assert outcome.entry == CreatedEntry(id=1, entry_number="JE-10001")
    assert submitter.state == SubmissionState.ACCEPTED
    assert submitter.history == [
        SubmissionState.EDITING,
        SubmissionState.VALIDATING,
        SubmissionState.SUBMITTING,
        SubmissionState.ACCEPTED,
    ]
    assert len(store.calls) == 1


def test_incomplete_draft_never_reaches_store():
    store = RecordingStore()
    draft = JournalDraft()
    draft.set_account(draft.lines[0].line_id, 11)
    draft.set_debit(draft.lines[0].line_id, "10")
    submitter = EntrySubmitter(draft, store)

    outcome = submitter.submit()

    assert outcome.status == "rejected"
    assert isinstance(outcome.error, IncompleteEntryError)
    assert outcome.message == "At least two valid lines are required."
    assert store.calls == []
    assert submitter.state == SubmissionState.EDITING


def test_zero_amount_draft_is_balanced_but_incomplete():
    store = RecordingStore()
    draft = JournalDraft()
    for line in draft.lines:
        draft.set_account(line.line_id, 11)
    assert draft.balance.is_balanced

    outcome = EntrySubmitter(draft, store).submit()

    assert isinstance(outcome.error, IncompleteEntryError)
    assert store.calls == []


def test_unbalanced_draft_reports_difference():
    store = RecordingStore()
    draft = _balanced_draft()
    draft.set_credit(draft.lines[1].line_id, "1100")
    submitter = EntrySubmitter(draft, store)

    outcome = submitter.submit()

    assert isinstance(outcome.error, UnbalancedEntryError)
    assert "exceed credits" in outcome.message
    assert "by 100.00" in outcome.message
    assert store.calls == []
    assert submitter.state == SubmissionState.EDITING


def test_payload_contains_only_valid_lines_in_order():
    store = RecordingStore()
    draft = JournalDraft(entry_date=date(2026, 5, 2))
    blank = draft.lines[0].line_id
    credit_row = draft.lines[1].line_id
    debit_row = draft.add_line().line_id
    draft.add_line()
    second_debit = draft.add_line().line_id

    draft.set_memo(blank, "left empty")
    draft.set_account(credit_row, 30)
    draft.set_credit(credit_row, "75")
    draft.set_account(debit_row, 40)
    draft.set_debit(debit_row, "50")
    draft.set_account(second_debit, 50)
    draft.set_debit(second_debit, "25")

    assert EntrySubmitter(draft, store).submit().status == "accepted"

    payload = store.calls[0]
    assert payload.entry_date == date(2026, 5, 2)
    assert [line.account_id for line in payload.lines] == [30, 40, 50]
    assert [line.credit for line in payload.lines] == [Decimal("75"), 0, 0]


def test_store_failure_preserves_draft_and_allows_retry():
    store = RecordingStore(error=SubmissionError("Account(s) not found: 22."))
    draft = _balanced_draft()
    submitter = EntrySubmitter(draft, store)

    outcome = submitter.submit()

    assert outcome.status == "rejected"
    assert outcome.message == "Account(s) not found: 22."
    assert submitter.state == SubmissionState.EDITING
    assert submitter.history[-2:] == [SubmissionState.REJECTED, SubmissionState.EDITING]
    assert [line.debit for line in draft.lines] == [Decimal("1200"), 0]
    assert draft.memo == "April rent"

    store.error = None
    retry = submitter.submit()
    assert retry.status == "accepted"
    assert len(store.calls) == 2


def test_unexpected_store_error_propagates_and_reenables_editing():
    store = RecordingStore(error=RuntimeError("boom"))
    submitter = EntrySubmitter(_balanced_draft(), store)

    with pytest.raises(RuntimeError):
        submitter.submit()
    assert submitter.state == SubmissionState.EDITING


def test_double_submit_while_in_flight_calls_store_once():
    entered = threading.Event()
    release = threading.Event()

    class BlockingStore(RecordingStore):
        def create_journal_entry(self, entry):
            self.calls.append(entry)
            entered.set()
            release.wait(timeout=5)
            return CreatedEntry(id=7, entry_number="JE-10007")

    store = BlockingStore()
    submitter = EntrySubmitter(_balanced_draft(), store)
    results = []
    worker = threading.Thread(target=lambda: results.append(submitter.submit()))
    worker.start()
    assert entered.wait(timeout=5)

    second = submitter.submit()
    release.set()
    worker.join(timeout=5)

    assert second.status == "ignored"
    assert results[0].status == "accepted"
    assert len(store.calls) == 1


def test_reentrant_submit_from_store_is_ignored():
    class ReentrantStore(RecordingStore):
        def create_journal_entry(self, entry):
            self.nested = submitter.submit()
            return super().create_journal_entry(entry)

    store = ReentrantStore()
    submitter = EntrySubmitter(_balanced_draft(), store)

    assert submitter.submit().status == "accepted"
    assert store.nested.status == "ignored"
    assert len(store.calls) == 1


def test_submit_after_acceptance_does_not_post_again():
    store = RecordingStore()
    submitter = EntrySubmitter(_balanced_draft(), store)
    first = submitter.submit()

    again = submitter.submit()

    assert again.status == "ignored"
    assert again.entry == first.entry
    assert len(store.calls) == 1
