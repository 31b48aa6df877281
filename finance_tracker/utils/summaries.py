"""
Dashboard, monthly report and budget progress figures.

Plain aggregations over the transaction dicts returned by the data layer.
Category names are resolved through a ``category_id -> name`` mapping and fall
back to "Uncategorized".
"""
import calendar
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional

from spending_analytics.analyzer import UNCATEGORIZED

BUDGET_WARNING_PCT = 75.0
TOP_CATEGORY_COUNT = 5


def _total(transactions: List[Dict[str, Any]], tx_type: str) -> float:
    return round(sum(float(t.get("amount", 0)) for t in transactions if t.get("type") == tx_type), 2)


def _savings_rate(income: float, expenses: float) -> float:
    return (income - expenses) / income * 100 if income > 0 else 0.0


def expenses_by_category(
    transactions: List[Dict[str, Any]],
    names: Optional[Mapping[str, str]] = None,
) -> Dict[str, float]:
    names = names or {}
    totals: Dict[str, float] = defaultdict(float)
    for t in transactions:
        if t.get("type") != "expense":
            continue
        totals[names.get(t.get("category_id"), UNCATEGORIZED)] += float(t.get("amount", 0))
    return {name: round(total, 2) for name, total in totals.items()}


def dashboard_stats(
    transactions: List[Dict[str, Any]],
    names: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    income = _total(transactions, "income")
    expenses = _total(transactions, "expense")
    return {
        "balance": round(income - expenses, 2),
        "income": income,
        "expenses": expenses,
        "savings_rate": round(_savings_rate(income, expenses)),
        "expenses_by_category": expenses_by_category(transactions, names),
    }


def monthly_report(
    month: str,
    transactions: List[Dict[str, Any]],
    names: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Summarize one month (``YYYY-MM``): totals, savings, category breakdown,
    the top spending categories and a per-day income/expense series.
    """
    year, month_num = (int(part) for part in month.split("-"))
    days_in_month = calendar.monthrange(year, month_num)[1]

    income_by_day = {f"{day:02d}": 0.0 for day in range(1, days_in_month + 1)}
    expenses_by_day = dict(income_by_day)
    for t in transactions:
        day = str(t["date"])[8:10]
        if day not in income_by_day:
            continue
        if t.get("type") == "income":
            income_by_day[day] += float(t.get("amount", 0))
        else:
            expenses_by_day[day] += float(t.get("amount", 0))

    total_income = _total(transactions, "income")
    total_expenses = _total(transactions, "expense")
    by_category = expenses_by_category(transactions, names)
    top = sorted(by_category.items(), key=lambda item: item[1], reverse=True)[:TOP_CATEGORY_COUNT]

    return {
        "month": month,
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net_savings": round(total_income - total_expenses, 2),
        "savings_rate": round(_savings_rate(total_income, total_expenses), 2),
        "expenses_by_category": by_category,
        "top_categories": [{"category": name, "amount": amount} for name, amount in top],
        "daily": [
            {"day": day, "income": round(income_by_day[day], 2), "expenses": round(expenses_by_day[day], 2)}
            for day in income_by_day
        ],
    }


def budget_status(spent: float, amount: float) -> str:
    if spent >= amount:
        return "exceeded"
    if spent >= amount * BUDGET_WARNING_PCT / 100:
        return "warning"
    return "ok"


def budget_progress(
    budgets: List[Dict[str, Any]],
    transactions: List[Dict[str, Any]],
    names: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Attach the month's spend to each budget and total them up."""
    names = names or {}
    spent_by_category: Dict[Optional[str], float] = defaultdict(float)
    for t in transactions:
        if t.get("type") == "expense":
            spent_by_category[t.get("category_id")] += float(t.get("amount", 0))

    rows = []
    for budget in budgets:
        amount = float(budget["amount"])
        spent = round(spent_by_category.get(budget["category_id"], 0.0), 2)
        rows.append({
            **budget,
            "category_name": names.get(budget["category_id"], UNCATEGORIZED),
            "spent": spent,
            "remaining": round(amount - spent, 2),
            "percent_used": round(spent / amount * 100, 1) if amount > 0 else 0.0,
            "status": budget_status(spent, amount),
        })

    total_budget = round(sum(float(b["amount"]) for b in budgets), 2)
    total_spent = round(sum(row["spent"] for row in rows), 2)
    return {
        "budgets": rows,
        "total_budget": total_budget,
        "total_spent": total_spent,
        "total_remaining": round(total_budget - total_spent, 2),
        "progress": round(total_spent / total_budget * 100, 1) if total_budget > 0 else 0.0,
    }


def filter_transactions(
    transactions: List[Dict[str, Any]],
    tx_type: Optional[str] = None,
    category_id: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "date",
    order: str = "desc",
) -> List[Dict[str, Any]]:
    result = transactions
    if tx_type:
        result = [t for t in result if t.get("type") == tx_type]
    if category_id:
        result = [t for t in result if t.get("category_id") == category_id]
    if search:
        needle = search.lower()
        result = [t for t in result if needle in str(t.get("description", "")).lower()]

    if sort == "amount":
        key = lambda t: float(t.get("amount", 0))
    elif sort == "description":
        key = lambda t: str(t.get("description", "")).lower()
    else:
        key = lambda t: str(t.get("date", ""))
    return sorted(result, key=key, reverse=(order == "desc"))


def paginate(items: List[Any], page: int, page_size: int) -> List[Any]:
    start = (page - 1) * page_size
    return items[start:start + page_size]
