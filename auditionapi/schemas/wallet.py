from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LedgerEntry(BaseModel):
    """One row of diamond_transactions_log"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    amount: int = Field(..., description="Signed delta, negative for debits")
    transaction_type: str
    description: str = ""
    created_at: Optional[datetime] = None


class TransactionHistoryResponse(BaseModel):
    transactions: List[LedgerEntry]


class LedgerIntegrityResponse(BaseModel):
    user_id: str
    balance: int
    ledger_sum: int
    entry_count: int
    difference: int
    status: str = Field(..., description="OK or MISMATCH")
