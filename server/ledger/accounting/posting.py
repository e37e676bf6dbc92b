from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Literal, Optional

ZERO = Decimal("0.00")
BALANCE_TOLERANCE = Decimal("0.01")
MIN_VALID_LINES = 2

Side = Literal["debit", "credit"]


@dataclass(frozen=True)
class JournalLineInput:
    account_id: Optional[int]
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    memo: str | None = None


@dataclass(frozen=True)
class JournalEntryInput:
    entry_date: date
    memo: str | None = None
    lines: List[JournalLineInput] = field(default_factory=list)


@dataclass(frozen=True)
class JournalTotals:
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO


@dataclass(frozen=True)
class BalanceCheck:
    is_balanced: bool
    difference: Decimal
    heavier_side: Optional[Side]


class JournalEntryError(ValueError):
    pass


class IncompleteEntryError(JournalEntryError):
    def __init__(self, valid_line_count: int):
        self.valid_line_count = valid_line_count
        super().__init__("At least two valid lines are required.")


class UnbalancedEntryError(JournalEntryError):
    def __init__(self, totals: JournalTotals, check: BalanceCheck):
        self.totals = totals
        self.difference = check.difference
        self.heavier_side = check.heavier_side
        if check.heavier_side == "debit":
            summary = f"Debits exceed credits by {check.difference:.2f} ({totals.total_debit:.2f} vs {totals.total_credit:.2f})"
        else:
            summary = f"Credits exceed debits by {check.difference:.2f} ({totals.total_credit:.2f} vs {totals.total_debit:.2f})"
        super().__init__(f"Journal entry is unbalanced. {summary}.")


def _amount(value: Decimal | None) -> Decimal:
    return value if value is not None else ZERO


def is_valid_line(line: JournalLineInput) -> bool:
    """A line can be posted once it names an account and carries a positive amount."""
    return bool(line.account_id) and (_amount(line.debit) > 0 or _amount(line.credit) > 0)


def filter_valid_lines(lines: Iterable[JournalLineInput]) -> List[JournalLineInput]:
    return [line for line in lines if is_valid_line(line)]


def compute_totals(lines: Iterable[JournalLineInput]) -> JournalTotals:
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        total_debit += _amount(line.debit)
        total_credit += _amount(line.credit)
    return JournalTotals(total_debit=total_debit, total_credit=total_credit)


def check_balance(totals: JournalTotals) -> BalanceCheck:
    """Compare debit and credit totals; equal within BALANCE_TOLERANCE (exclusive) counts as balanced."""
    difference = abs(totals.total_debit - totals.total_credit)
    heavier_side: Optional[Side] = None
    if totals.total_debit > totals.total_credit:
        heavier_side = "debit"
    elif totals.total_credit > totals.total_debit:
        heavier_side = "credit"
    return BalanceCheck(
        is_balanced=difference < BALANCE_TOLERANCE,
        difference=difference,
        heavier_side=heavier_side,
    )


def ensure_balanced(lines: Iterable[JournalLineInput]) -> BalanceCheck:
    totals = compute_totals(lines)
    check = check_balance(totals)
    if not check.is_balanced:
        raise UnbalancedEntryError(totals, check)
    return check


def ensure_complete(lines: List[JournalLineInput]) -> None:
    if len(lines) < MIN_VALID_LINES:
        raise IncompleteEntryError(len(lines))


def validate_entry(entry: JournalEntryInput) -> JournalEntryInput:
    """Run the posting gates in order and return the entry reduced to its valid lines.

    Completeness is checked before balance, so an entry with fewer than two
    valid lines is rejected as incomplete even when its totals agree.
    """
    valid_lines = filter_valid_lines(entry.lines)
    ensure_complete(valid_lines)
    ensure_balanced(valid_lines)
    return replace(entry, lines=valid_lines)
