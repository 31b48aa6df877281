from __future__ import annotations

import logging
import statistics
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Insight:
    """A user-facing observation about spending behaviour."""

    type: str
    message: str
    value: Optional[float] = None
    trend: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # Remove None values for cleaner JSON responses
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class CategoryPrediction:
    category_id: Optional[str]
    predicted_amount: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "predicted_amount": round(self.predicted_amount, 2),
            "confidence": round(self.confidence, 4),
        }


@dataclass(frozen=True)
class TrendResult:
    trend: str
    percentage: float


def month_key(value: Any) -> str:
    """Return the ``YYYY-MM`` key for a date, datetime or ISO date string."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m")
    return date.fromisoformat(str(value)[:10]).strftime("%Y-%m")


def previous_month(today: date) -> date:
    return today.replace(day=1) - timedelta(days=1)


def is_expense(transaction: Mapping[str, Any]) -> bool:
    return transaction.get("type") == "expense"


def fit_line(values: List[float]) -> Tuple[float, float, float]:
    """
    Ordinary least squares fit of ``values`` against their zero-based index.

    Returns ``(slope, intercept, r_squared)``. A series with no variance has
    no meaningful R² and reports 0.
    """
    n = len(values)
    xs = range(n)
    mean_x = (n - 1) / 2
    mean_y = statistics.fmean(values)

    sxx = sum((x - mean_x) ** 2 for x in xs)
    sxy = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, values))
    slope = sxy / sxx if sxx else 0.0
    intercept = mean_y - slope * mean_x

    ss_tot = sum((y - mean_y) ** 2 for y in values)
    if ss_tot == 0:
        return slope, intercept, 0.0
    ss_res = sum((y - (intercept + slope * x)) ** 2 for x, y in zip(xs, values))
    return slope, intercept, 1 - ss_res / ss_tot


class SpendingAnalyzer:
    """
    Stateless spending analytics shared by the API routes and any batch job.

    Every call rebuilds its month buckets from the transactions it is given;
    nothing is cached between calls and the input is never mutated. Only
    ``expense`` records take part in the analysis.
    """

    def __init__(
        self,
        trend_threshold: float = 10.0,
        anomaly_sigma: float = 2.0,
        savings_ratio: float = 0.7,
        min_history_months: int = 3,
        currency_symbol: str = "£",
    ) -> None:
        self._trend_threshold = trend_threshold
        self._anomaly_sigma = anomaly_sigma
        self._savings_ratio = savings_ratio
        self._min_history_months = min_history_months
        self._currency = currency_symbol

    def monthly_totals(self, transactions: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
        totals: Dict[str, float] = defaultdict(float)
        for tx in transactions:
            if not is_expense(tx):
                continue
            totals[month_key(tx["date"])] += float(tx.get("amount", 0))
        return dict(totals)

    def group_by_category(
        self, transactions: Iterable[Mapping[str, Any]]
    ) -> Dict[Optional[str], List[Mapping[str, Any]]]:
        groups: Dict[Optional[str], List[Mapping[str, Any]]] = defaultdict(list)
        for tx in transactions:
            if is_expense(tx):
                groups[tx.get("category_id")].append(tx)
        return dict(groups)

    def spending_trend(self, monthly: Mapping[str, float], today: date) -> TrendResult:
        current = monthly.get(month_key(today), 0.0)
        previous = monthly.get(month_key(previous_month(today)), 0.0)

        if previous == 0:
            return TrendResult(trend="stable", percentage=0.0)

        change = (current - previous) / previous * 100
        return TrendResult(trend="up" if change > 0 else "down", percentage=abs(change))

    def detect_anomalies(
        self,
        transactions: Iterable[Mapping[str, Any]],
        categories: Optional[Mapping[Any, Any]] = None,
        today: Optional[date] = None,
    ) -> List[Insight]:
        """
        Flag categories whose current-month spend exceeds the historical mean
        by more than ``anomaly_sigma`` population standard deviations.
        """
        today = today or date.today()
        current_key = month_key(today)
        insights: List[Insight] = []

        for category_id, items in self.group_by_category(transactions).items():
            monthly = self.monthly_totals(items)
            current = monthly.pop(current_key, 0.0)
            history = list(monthly.values())
            if len(history) < self._min_history_months:
                continue

            mean = statistics.fmean(history)
            stdev = statistics.pstdev(history)
            if mean == 0:
                continue

            if current > mean + self._anomaly_sigma * stdev:
                percentage = (current - mean) / mean * 100
                name = self.category_name(category_id, items, categories)
                insights.append(Insight(
                    type="warning",
                    message=f"Unusual spending detected in {name}: {percentage:.1f}% higher than average",
                    value=percentage,
                    trend="up",
                ))
        return insights

    def find_savings_opportunities(
        self,
        transactions: Iterable[Mapping[str, Any]],
        categories: Optional[Mapping[Any, Any]] = None,
    ) -> List[Insight]:
        insights: List[Insight] = []

        for category_id, items in self.group_by_category(transactions).items():
            amounts = list(self.monthly_totals(items).values())
            if len(amounts) < self._min_history_months:
                continue

            average = statistics.fmean(amounts)
            minimum = min(amounts)
            if minimum < average * self._savings_ratio:
                savings = average - minimum
                name = self.category_name(category_id, items, categories)
                insights.append(Insight(
                    type="info",
                    message=(
                        f"You've spent as low as {self._currency}{minimum:.2f} on {name} before. "
                        f"Targeting this could save you {self._currency}{savings:.2f} per month."
                    ),
                    value=savings,
                ))
        return insights

    def analyze(
        self,
        transactions: List[Mapping[str, Any]],
        categories: Optional[Mapping[Any, Any]] = None,
        today: Optional[date] = None,
    ) -> List[Insight]:
        """
        Build the insight list: the month-over-month trend first (only when it
        moves more than ``trend_threshold`` percent), then one warning per
        anomalous category, then one info entry per savings opportunity.
        """
        today = today or date.today()
        insights: List[Insight] = []

        trend = self.spending_trend(self.monthly_totals(transactions), today)
        if trend.percentage > self._trend_threshold:
            if trend.trend == "up":
                insights.append(Insight(
                    type="warning",
                    message=f"Your spending has increased by {trend.percentage:.1f}% compared to last month",
                    value=trend.percentage,
                    trend="up",
                ))
            elif trend.trend == "down":
                insights.append(Insight(
                    type="success",
                    message=f"Great job! You've reduced spending by {trend.percentage:.1f}% compared to last month",
                    value=trend.percentage,
                    trend="down",
                ))

        insights.extend(self.detect_anomalies(transactions, categories, today))
        insights.extend(self.find_savings_opportunities(transactions, categories))

        logger.debug(f"Generated {len(insights)} insights from {len(transactions)} transactions")
        return insights

    def predict(self, transactions: List[Mapping[str, Any]]) -> List[CategoryPrediction]:
        """
        Forecast next month's spend per category with a linear fit over the
        category's monthly totals in chronological order.
        """
        predictions: List[CategoryPrediction] = []

        for category_id, items in self.group_by_category(transactions).items():
            monthly = self.monthly_totals(items)
            if len(monthly) < self._min_history_months:
                continue

            values = [monthly[key] for key in sorted(monthly)]
            slope, intercept, r_squared = fit_line(values)
            predicted = intercept + slope * len(values)

            predictions.append(CategoryPrediction(
                category_id=category_id,
                predicted_amount=max(0.0, predicted),
                confidence=max(0.0, min(1.0, r_squared)),
            ))

        logger.debug(f"Generated {len(predictions)} category predictions")
        return predictions

    @staticmethod
    def category_name(
        category_id: Any,
        items: List[Mapping[str, Any]],
        categories: Optional[Mapping[Any, Any]] = None,
    ) -> str:
        if categories and category_id in categories:
            entry = categories[category_id]
            name = entry.get("name") if isinstance(entry, Mapping) else entry
            if name:
                return name
        embedded = items[0].get("category") if items else None
        if isinstance(embedded, Mapping) and embedded.get("name"):
            return embedded["name"]
        return UNCATEGORIZED
