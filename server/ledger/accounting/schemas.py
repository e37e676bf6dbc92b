from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


JournalEntryStatus = Literal["pending", "approved", "posted", "void"]


class JournalLineCreate(BaseModel):
    account_id: int
    debit: Decimal = Field(Decimal("0"), ge=Decimal("0"))
    credit: Decimal = Field(Decimal("0"), ge=Decimal("0"))
    memo: Optional[str] = Field(None, max_length=255)


class JournalEntryCreate(BaseModel):
    entry_date: date
    memo: Optional[str] = Field(None, max_length=255)
    lines: list[JournalLineCreate] = Field(..., min_length=2)

    @field_validator("lines")
    @classmethod
    def validate_lines(cls, value: list[JournalLineCreate]) -> list[JournalLineCreate]:
        for index, line in enumerate(value, start=1):
            if line.debit > 0 and line.credit > 0:
                raise ValueError(f"Line {index} cannot carry both a debit and a credit.")
        return value


class JournalLineResponse(BaseModel):
    id: int
    line_number: int
    account_id: int
    account_code: Optional[str] = None
    account_name: Optional[str] = None
    debit: Decimal
    credit: Decimal
    memo: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class JournalEntryResponse(BaseModel):
    id: int
    entry_number: str
    entry_date: date
    memo: Optional[str] = None
    status: str
    total_debit: Decimal
    total_credit: Decimal
    created_at: datetime
    lines: list[JournalLineResponse]


class JournalEntryListRow(BaseModel):
    id: int
    entry_number: str
    entry_date: date
    memo: Optional[str] = None
    status: str
    total_debit: Decimal
    total_credit: Decimal
    line_count: int


class JournalEntryListResponse(BaseModel):
    entries: list[JournalEntryListRow]
    total: int
    pages: int
    pending_count: int
    total_debit: Decimal
    total_credit: Decimal


class JournalEntryStatusUpdate(BaseModel):
    status: JournalEntryStatus
