from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def make_budget_id(month: str, category_id: str) -> str:
    return f"{month}#{category_id}"


class BudgetCreate(BaseModel):
    amount: float = Field(gt=0)
    month: str = Field(pattern=MONTH_PATTERN)  # YYYY-MM
    category_id: str


class BudgetUpdate(BaseModel):
    amount: float = Field(gt=0)


class BudgetInDB(BudgetCreate):
    user_id: str
    budget_id: str = ""
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())

    def model_post_init(self, __context) -> None:
        if not self.budget_id:
            self.budget_id = make_budget_id(self.month, self.category_id)


class BudgetPublic(BaseModel):
    budget_id: str
    amount: float
    month: str
    category_id: str
    created_at: Optional[str] = None
