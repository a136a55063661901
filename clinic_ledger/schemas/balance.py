from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from clinic_ledger.models import DepositChannel
from clinic_ledger.schemas.payment import LedgerEntryOut


class DepositResult(BaseModel):
    entry: LedgerEntryOut
    new_balance: Decimal
    message: str


class BalanceSummary(BaseModel):
    account_id: int
    balance: Decimal
    entries: list[LedgerEntryOut]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class LedgerPage(BaseModel):
    entries: list[LedgerEntryOut]
    pagination: Pagination


class SavedPaymentMethodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    channel: DepositChannel
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    bank_name: Optional[str] = None
    branch_code: Optional[str] = None
    is_default: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
