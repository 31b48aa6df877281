from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "StudentFinanceTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_TABLE_TRANSACTIONS: str = Field(default="finance-tracker-transactions")
    DYNAMO_TABLE_CATEGORIES: str = Field(default="finance-tracker-categories")
    DYNAMO_TABLE_BUDGETS: str = Field(default="finance-tracker-budgets")
    DYNAMO_TABLE_PROFILES: str = Field(default="finance-tracker-profiles")

    # AWS S3 (monthly CSV exports)
    S3_BUCKET_NAME: str = Field(default="finance-tracker-exports")
    S3_REGION: str = Field(default="eu-west-1")

    # Tokens are issued by the hosting platform; we only verify them
    JWT_SECRET: str = Field(default="local-development-secret-change-me-in-env")
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # Spending analytics; CURRENCY_SYMBOL applies until a user picks a currency
    CURRENCY_SYMBOL: str = "£"
    TREND_THRESHOLD_PCT: float = 10.0
    ANOMALY_SIGMA: float = 2.0
    SAVINGS_RATIO: float = 0.7
    MIN_HISTORY_MONTHS: int = 3
    PREDICTION_MIN_CONFIDENCE: float = 0.7


settings = Settings()
