"""Editable journal entry draft for a single edit session.

The draft owns its rows; nothing is shared between sessions and nothing is
persisted until an EntrySubmitter hands a validated copy to a store.
"""
import itertools
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ledger.accounting.posting import (
    MIN_VALID_LINES,
    ZERO,
    BalanceCheck,
    JournalEntryError,
    JournalEntryInput,
    JournalLineInput,
    JournalTotals,
    check_balance,
    compute_totals,
    filter_valid_lines,
)
from ledger.utils.money import parse_amount


class DraftError(JournalEntryError):
    pass


@dataclass
class DraftLine:
    line_id: str
    account_id: Optional[int] = None
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    memo: str | None = None

    def to_input(self) -> JournalLineInput:
        return JournalLineInput(
            account_id=self.account_id,
            debit=self.debit,
            credit=self.credit,
            memo=self.memo or None,
        )


class JournalDraft:
    def __init__(self, entry_date: date | None = None, memo: str | None = None):
        self.entry_date = entry_date or date.today()
        self.memo = memo
        self._ids = itertools.count(1)
        self._lines: List[DraftLine] = []
        for _ in range(MIN_VALID_LINES):
            self.add_line()

    @property
    def lines(self) -> List[DraftLine]:
        return list(self._lines)

    def add_line(self) -> DraftLine:
        line = DraftLine(line_id=str(next(self._ids)))
        self._lines.append(line)
        return line

    def remove_line(self, line_id: str) -> None:
        line = self.get_line(line_id)
        if len(self._lines) <= MIN_VALID_LINES:
            raise DraftError("At least two lines are required.")
        self._lines.remove(line)

    def get_line(self, line_id: str) -> DraftLine:
        for line in self._lines:
            if line.line_id == line_id:
                return line
        raise DraftError(f"Line {line_id} not found.")

    def set_account(self, line_id: str, account_id: Optional[int]) -> DraftLine:
        line = self.get_line(line_id)
        line.account_id = account_id or None
        return line

    def set_memo(self, line_id: str, memo: str | None) -> DraftLine:
        line = self.get_line(line_id)
        line.memo = memo
        return line

    def set_debit(self, line_id: str, value) -> DraftLine:
        line = self.get_line(line_id)
        amount = parse_amount(value)
        line.debit = amount
        # Only a positive amount clears the other side; zero leaves it alone.
        if amount > 0:
            line.credit = ZERO
        return line

    def set_credit(self, line_id: str, value) -> DraftLine:
        line = self.get_line(line_id)
        amount = parse_amount(value)
        line.credit = amount
        if amount > 0:
            line.debit = ZERO
        return line

    def update_line(self, line_id: str, field: str, value) -> DraftLine:
        setters = {
            "account_id": self.set_account,
            "memo": self.set_memo,
            "debit": self.set_debit,
            "credit": self.set_credit,
        }
        setter = setters.get(field)
        if setter is None:
            raise DraftError(f"Unknown line field '{field}'.")
        return setter(line_id, value)

    def line_inputs(self) -> List[JournalLineInput]:
        return [line.to_input() for line in self._lines]

    @property
    def valid_lines(self) -> List[JournalLineInput]:
        return filter_valid_lines(self.line_inputs())

    @property
    def totals(self) -> JournalTotals:
        return compute_totals(self.line_inputs())

    @property
    def valid_totals(self) -> JournalTotals:
        return compute_totals(self.valid_lines)

    @property
    def balance(self) -> BalanceCheck:
        return check_balance(self.totals)

    def to_entry(self) -> JournalEntryInput:
        return JournalEntryInput(entry_date=self.entry_date, memo=self.memo or None, lines=self.line_inputs())
