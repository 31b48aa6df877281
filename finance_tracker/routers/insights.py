"""
Insights Router
Spending insights and next-month predictions from the analytics engine
"""
import logging
from typing import Dict, List, Mapping

from fastapi import APIRouter, Depends

from finance_tracker.core.config import settings
from finance_tracker.core.security import get_current_user_id
from finance_tracker.db import dynamo
from finance_tracker.routers.profile import currency_symbol
from spending_analytics import CategoryPrediction, Insight, SpendingAnalyzer

router = APIRouter()
logger = logging.getLogger(__name__)


def build_analyzer(symbol: str = settings.CURRENCY_SYMBOL) -> SpendingAnalyzer:
    return SpendingAnalyzer(
        trend_threshold=settings.TREND_THRESHOLD_PCT,
        anomaly_sigma=settings.ANOMALY_SIGMA,
        savings_ratio=settings.SAVINGS_RATIO,
        min_history_months=settings.MIN_HISTORY_MONTHS,
        currency_symbol=symbol,
    )


def prediction_insights(
    predictions: List[CategoryPrediction],
    names: Mapping[str, str],
    min_confidence: float = settings.PREDICTION_MIN_CONFIDENCE,
    symbol: str = settings.CURRENCY_SYMBOL,
) -> List[Insight]:
    """
    Turn confident predictions into info insights. Predictions at or below
    ``min_confidence`` or for categories that no longer resolve are dropped.
    """
    insights = []
    for prediction in predictions:
        if prediction.confidence <= min_confidence:
            continue
        name = names.get(prediction.category_id)
        if not name:
            continue
        insights.append(Insight(
            type="info",
            message=(
                f"Based on your spending patterns, you might spend around "
                f"{symbol}{prediction.predicted_amount:.2f} on {name} next month."
            ),
            value=prediction.predicted_amount,
        ))
    return insights


@router.get("/")
def get_insights(user_id: str = Depends(get_current_user_id)) -> Dict:
    transactions = dynamo.list_transactions(user_id)
    names = dynamo.category_names(user_id)
    symbol = currency_symbol(dynamo.get_profile(user_id))
    analyzer = build_analyzer(symbol)

    insights = analyzer.analyze(transactions, names)
    insights.extend(prediction_insights(analyzer.predict(transactions), names, symbol=symbol))

    logger.info(f"Generated {len(insights)} insights for user {user_id}")
    return {"insights": [insight.to_dict() for insight in insights]}


@router.get("/predictions")
def get_predictions(user_id: str = Depends(get_current_user_id)) -> Dict:
    transactions = dynamo.list_transactions(user_id)
    names = dynamo.category_names(user_id)

    predictions = []
    for prediction in build_analyzer().predict(transactions):
        entry = prediction.to_dict()
        entry["category_name"] = names.get(prediction.category_id)
        predictions.append(entry)
    return {"predictions": predictions}
