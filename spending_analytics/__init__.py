"""
spending_analytics
~~~~~~~~~~~~~~~~~~

Spending analytics for the student finance tracker. The SpendingAnalyzer class
turns a user's transactions into spending insights (trend warnings, anomaly
alerts, savings opportunities) and per-category next-month predictions, so
that API routes and batch jobs share one implementation.
"""

from .analyzer import (
    CategoryPrediction,
    Insight,
    SpendingAnalyzer,
    TrendResult,
    fit_line,
    month_key,
)

__all__ = [
    "CategoryPrediction",
    "Insight",
    "SpendingAnalyzer",
    "TrendResult",
    "fit_line",
    "month_key",
]
