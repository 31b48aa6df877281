import logging
import uuid
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import Response

from finance_tracker.core.security import get_current_user_id
from finance_tracker.db import dynamo
from finance_tracker.models.budget import MONTH_PATTERN
from finance_tracker.utils import export
from finance_tracker.utils.summaries import dashboard_stats, monthly_report

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/dashboard")
def get_dashboard(user_id: str = Depends(get_current_user_id)) -> Dict:
    """
    Balance, income, expenses and savings rate over all of a user's transactions.
    """
    transactions = dynamo.list_transactions(user_id)
    return dashboard_stats(transactions, dynamo.category_names(user_id))


@router.get("/monthly/{month}")
def generate_monthly_report(
    month: str = Path(pattern=MONTH_PATTERN),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """
    Generate report for the given month (e.g., '2025-11'), upload the CSV export to S3,
    return figures + download link.
    """
    logger.info(f"Generating monthly report for user_id: {user_id}, month: {month}")

    transactions = dynamo.list_transactions(user_id, month)
    names = dynamo.category_names(user_id)
    logger.info(f"Found {len(transactions)} transactions for user {user_id} in month {month}")

    report = monthly_report(month, transactions, names)

    csv_url = None
    if transactions:
        report_id = f"{user_id}_{month}_{uuid.uuid4().hex[:6]}"
        try:
            csv_url = export.upload_csv(user_id, month, export.render_csv(transactions, names), report_id)
            logger.info(f"CSV uploaded: {csv_url}")
        except Exception as e:
            logger.error(f"Error uploading CSV: {str(e)}")

    return {**report, "csv_report_url": csv_url}


@router.get("/monthly/{month}/csv")
def download_monthly_csv(
    month: str = Path(pattern=MONTH_PATTERN),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    transactions = dynamo.list_transactions(user_id, month)
    if not transactions:
        raise HTTPException(status_code=404, detail="No transactions found for this month.")

    content = export.render_csv(transactions, dynamo.category_names(user_id))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="transactions-{month}.csv"'},
    )
