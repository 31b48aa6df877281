from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

# Seeded for a user with no categories yet
DEFAULT_CATEGORIES = [
    {"name": "Housing", "color": "#3B82F6", "icon": "home"},
    {"name": "Food", "color": "#10B981", "icon": "shopping-bag"},
    {"name": "Transportation", "color": "#F59E0B", "icon": "car"},
    {"name": "Entertainment", "color": "#8B5CF6", "icon": "film"},
    {"name": "Healthcare", "color": "#EF4444", "icon": "heart"},
    {"name": "Shopping", "color": "#EC4899", "icon": "shopping-cart"},
    {"name": "Personal", "color": "#6366F1", "icon": "user"},
    {"name": "Bills", "color": "#F97316", "icon": "credit-card"},
    {"name": "Savings", "color": "#0EA5E9", "icon": "piggy-bank"},
    {"name": "Salary", "color": "#22C55E", "icon": "dollar-sign"},
    {"name": "Investments", "color": "#A855F7", "icon": "trending-up"},
    {"name": "Other", "color": "#64748B", "icon": "more-horizontal"},
]


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = "#64748B"
    icon: str = "more-horizontal"


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryInDB(CategoryCreate):
    user_id: str
    category_id: str = Field(default_factory=lambda: uuid4().hex)
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class CategoryPublic(BaseModel):
    category_id: str
    name: str
    color: str
    icon: str
    created_at: Optional[str] = None
