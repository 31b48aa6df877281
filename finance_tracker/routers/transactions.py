import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.core.security import get_current_user_id
from finance_tracker.db import dynamo
from finance_tracker.models.budget import MONTH_PATTERN
from finance_tracker.models.transaction import (
    TransactionCreate,
    TransactionInDB,
    TransactionPage,
    TransactionPublic,
    TransactionType,
    TransactionUpdate,
)
from finance_tracker.utils.summaries import filter_transactions, paginate

router = APIRouter()
logger = logging.getLogger(__name__)


def _check_category(user_id: str, category_id: Optional[str]) -> None:
    if category_id and not dynamo.get_category(user_id, category_id):
        raise HTTPException(status_code=404, detail="Category not found")


@router.post("/", response_model=TransactionPublic, status_code=status.HTTP_201_CREATED)
def create_transaction(transaction: TransactionCreate, user_id: str = Depends(get_current_user_id)):
    _check_category(user_id, transaction.category_id)
    transaction_db = TransactionInDB(user_id=user_id, **transaction.model_dump())
    success = dynamo.put_transaction(transaction_db.model_dump(mode="json"))
    if not success:
        raise HTTPException(status_code=500, detail="Failed to save transaction")
    return TransactionPublic(**transaction_db.model_dump())


@router.get("/", response_model=TransactionPage)
def list_transactions(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    type: Optional[TransactionType] = None,
    category_id: Optional[str] = None,
    search: Optional[str] = None,
    sort: Literal["date", "amount", "description"] = "date",
    order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
):
    """
    month must follow YYYY-MM format. Example: 2025-11
    """
    transactions = dynamo.list_transactions(user_id, month or "")
    filtered = filter_transactions(
        transactions,
        tx_type=type.value if type else None,
        category_id=category_id,
        search=search,
        sort=sort,
        order=order,
    )
    return {
        "items": paginate(filtered, page, page_size),
        "total": len(filtered),
        "page": page,
        "page_size": page_size,
    }


@router.get("/{transaction_id}", response_model=TransactionPublic)
def get_transaction(transaction_id: str, user_id: str = Depends(get_current_user_id)):
    transaction = dynamo.get_transaction(user_id, transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.put("/{transaction_id}", response_model=TransactionPublic)
def update_transaction(
    transaction_id: str,
    transaction_update: TransactionUpdate,
    user_id: str = Depends(get_current_user_id),
):
    mutable_fields = transaction_update.model_dump(mode="json", exclude_unset=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    _check_category(user_id, mutable_fields.get("category_id"))

    existing = dynamo.get_transaction(user_id, transaction_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Transaction not found")

    if "date" in mutable_fields and mutable_fields["date"] != existing["date"]:
        # The date is part of the sort key, so the record moves
        moved = TransactionInDB(**{**existing, **mutable_fields, "transaction_id": ""})
        if not dynamo.put_transaction(moved.model_dump(mode="json")):
            raise HTTPException(status_code=500, detail="Failed to update transaction")
        if not dynamo.delete_transaction(user_id, transaction_id):
            # Keep a single copy: drop the new record again
            if not dynamo.delete_transaction(user_id, moved.transaction_id):
                logger.error(f"Could not roll back moved transaction {moved.transaction_id}")
            raise HTTPException(status_code=500, detail="Failed to update transaction")
        logger.info(f"Moved transaction {transaction_id} to {moved.transaction_id}")
        return TransactionPublic(**moved.model_dump())

    updated = dynamo.update_transaction(user_id, transaction_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return updated


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(transaction_id: str, user_id: str = Depends(get_current_user_id)):
    deleted = dynamo.delete_transaction(user_id, transaction_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return None
