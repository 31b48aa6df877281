from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Currency(str, Enum):
    GBP = "GBP"
    EUR = "EUR"
    USD = "USD"
    JPY = "JPY"
    CAD = "CAD"
    AUD = "AUD"
    CNY = "CNY"
    INR = "INR"
    BRL = "BRL"
    RUB = "RUB"


CURRENCY_SYMBOLS = {
    Currency.GBP: "£",
    Currency.EUR: "€",
    Currency.USD: "$",
    Currency.JPY: "¥",
    Currency.CAD: "CA$",
    Currency.AUD: "A$",
    Currency.CNY: "CN¥",
    Currency.INR: "₹",
    Currency.BRL: "R$",
    Currency.RUB: "₽",
}


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=120)
    avatar_url: Optional[str] = None
    currency: Optional[Currency] = None


class ProfileInDB(BaseModel):
    user_id: str
    full_name: str = ""
    avatar_url: Optional[str] = None
    # None until the user picks one; insights then use the configured symbol
    currency: Optional[Currency] = None
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class ProfilePublic(BaseModel):
    user_id: str
    full_name: str = ""
    avatar_url: Optional[str] = None
    currency: Optional[Currency] = None
    currency_symbol: str
    updated_at: Optional[str] = None
