from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status

from finance_tracker.core.security import get_current_user_id
from finance_tracker.db import dynamo
from finance_tracker.models.budget import (
    MONTH_PATTERN,
    BudgetCreate,
    BudgetInDB,
    BudgetPublic,
    BudgetUpdate,
    make_budget_id,
)
from finance_tracker.utils.summaries import budget_progress

router = APIRouter()


@router.post("/", response_model=BudgetPublic, status_code=status.HTTP_201_CREATED)
def create_budget(budget: BudgetCreate, user_id: str = Depends(get_current_user_id)):
    budget_db = BudgetInDB(user_id=user_id, **budget.model_dump())

    if dynamo.get_budget(user_id, budget_db.budget_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A budget for this category and month already exists",
        )
    if not dynamo.get_category(user_id, budget.category_id):
        raise HTTPException(status_code=404, detail="Category not found")

    if not dynamo.put_budget(budget_db.model_dump()):
        raise HTTPException(status_code=500, detail="Failed to save budget")
    return BudgetPublic(**budget_db.model_dump())


@router.get("/{month}")
def get_budget_progress(
    month: str = Path(pattern=MONTH_PATTERN),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """
    Budgets of a month (YYYY-MM) with what has been spent against each.
    """
    budgets = dynamo.list_budgets(user_id, month)
    transactions = dynamo.list_transactions(user_id, month)
    progress = budget_progress(budgets, transactions, dynamo.category_names(user_id))
    return {"month": month, **progress}


@router.put("/{month}/{category_id}", response_model=BudgetPublic)
def update_budget(
    category_id: str,
    budget_update: BudgetUpdate,
    month: str = Path(pattern=MONTH_PATTERN),
    user_id: str = Depends(get_current_user_id),
):
    updated = dynamo.update_budget(user_id, make_budget_id(month, category_id), budget_update.model_dump())
    if not updated:
        raise HTTPException(status_code=404, detail="Budget not found")
    return updated


@router.delete("/{month}/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    category_id: str,
    month: str = Path(pattern=MONTH_PATTERN),
    user_id: str = Depends(get_current_user_id),
):
    if not dynamo.delete_budget(user_id, make_budget_id(month, category_id)):
        raise HTTPException(status_code=404, detail="Budget not found")
    return None
