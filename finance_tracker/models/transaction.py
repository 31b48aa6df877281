from datetime import date as Date, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


def make_transaction_id(tx_date: Date) -> str:
    """Sort key: the ISO date first so a month is a key prefix."""
    return f"{tx_date.isoformat()}_{uuid4().hex[:12]}"


class TransactionCreate(BaseModel):
    amount: float = Field(gt=0)
    date: Date
    description: str = ""
    category_id: Optional[str] = None
    type: TransactionType


class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, gt=0)
    date: Optional[Date] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    type: Optional[TransactionType] = None


class TransactionInDB(TransactionCreate):
    user_id: str
    transaction_id: str = ""
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())

    def model_post_init(self, __context) -> None:
        if not self.transaction_id:
            self.transaction_id = make_transaction_id(self.date)


class TransactionPublic(BaseModel):
    transaction_id: str
    amount: float
    date: Date
    description: str = ""
    category_id: Optional[str] = None
    type: TransactionType
    created_at: Optional[str] = None


class TransactionPage(BaseModel):
    items: list[TransactionPublic]
    total: int
    page: int
    page_size: int
