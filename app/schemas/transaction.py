# app/schemas/transaction.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid

from app.models.transaction import Network, Provider, TransactionType


class OnrampRequest(BaseModel):
    goal_id: uuid.UUID
    amount: float = Field(..., description="Reference-currency amount to onramp")
    batch_id: Optional[str] = Field(None, max_length=64, description="Idempotency key; generated when absent")


class SwapRequest(BaseModel):
    goal_id: uuid.UUID
    batch_id: str = Field(..., min_length=1, max_length=64, description="batchId of the onramp being swapped")


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    goal_id: uuid.UUID
    batch_id: str
    type: TransactionType
    provider: Optional[Provider] = None
    network: Optional[Network] = None
    txn_hash: Optional[str] = None
    amount_reference: Optional[float] = None
    amount_crypto: Optional[float] = None
    token_mint: Optional[str] = None
    timestamp: datetime
    meta: Optional[Dict[str, Any]] = None


class DepositResponse(BaseModel):
    success: bool = True
    batch_id: str
    transaction: TransactionRead
    explorer_url: Optional[str] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class TransactionListResponse(BaseModel):
    success: bool = True
    transactions: List[TransactionRead]
    pagination: Pagination


class InvestmentStatusResponse(BaseModel):
    success: bool = True
    batch_id: str
    goal_id: uuid.UUID
    state: str
    transactions: List[TransactionRead]


class HistoryBatch(BaseModel):
    batch_id: str
    goal_id: uuid.UUID
    coin: str
    state: str
    timestamp: datetime
    onramp: Optional[TransactionRead] = None
    swap: Optional[TransactionRead] = None


class CursorPagination(BaseModel):
    limit: int
    has_more: bool
    # Pass back as ``after`` to fetch the next page
    next_cursor: Optional[datetime] = None


class HistoryResponse(BaseModel):
    success: bool = True
    history: List[HistoryBatch]
    pagination: CursorPagination
