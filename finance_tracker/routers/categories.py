import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from finance_tracker.core.security import get_current_user_id
from finance_tracker.db import dynamo
from finance_tracker.models.category import (
    DEFAULT_CATEGORIES,
    CategoryCreate,
    CategoryInDB,
    CategoryPublic,
    CategoryUpdate,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=CategoryPublic, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, user_id: str = Depends(get_current_user_id)):
    category_db = CategoryInDB(user_id=user_id, **category.model_dump())
    if not dynamo.put_category(category_db.model_dump()):
        raise HTTPException(status_code=500, detail="Failed to save category")
    return CategoryPublic(**category_db.model_dump())


@router.get("/", response_model=List[CategoryPublic])
def list_categories(user_id: str = Depends(get_current_user_id)):
    return sorted(dynamo.list_categories(user_id), key=lambda c: c["name"].lower())


@router.post("/defaults", response_model=List[CategoryPublic])
def create_default_categories(user_id: str = Depends(get_current_user_id)):
    """
    Seed the default categories for a user who has none yet.
    Existing categories are left untouched.
    """
    existing = dynamo.list_categories(user_id)
    if existing:
        return sorted(existing, key=lambda c: c["name"].lower())

    created = []
    for default in DEFAULT_CATEGORIES:
        category_db = CategoryInDB(user_id=user_id, **default)
        if not dynamo.put_category(category_db.model_dump()):
            raise HTTPException(status_code=500, detail="Failed to create default categories")
        created.append(category_db.model_dump())

    logger.info(f"Created {len(created)} default categories for user {user_id}")
    return sorted(created, key=lambda c: c["name"].lower())


@router.put("/{category_id}", response_model=CategoryPublic)
def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    user_id: str = Depends(get_current_user_id),
):
    mutable_fields = category_update.model_dump(exclude_unset=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = dynamo.update_category(user_id, category_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: str, user_id: str = Depends(get_current_user_id)):
    references = dynamo.count_category_references(user_id, category_id)
    if references is None:
        raise HTTPException(status_code=500, detail="Could not check category usage")
    if references["transactions"]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete: This category is used in {references['transactions']} transactions",
        )
    if references["budgets"]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete: This category is used in {references['budgets']} budgets",
        )

    if not dynamo.delete_category(user_id, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return None
