import csv
import io
import logging
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.exceptions import ClientError

from finance_tracker.core.config import settings
from spending_analytics.analyzer import UNCATEGORIZED

logger = logging.getLogger(__name__)

# Initialize S3 client using default AWS credential chain
# (environment variables, AWS credentials file, or IAM role)
s3 = boto3.client("s3", region_name=settings.S3_REGION)

CSV_HEADERS = ["Date", "Type", "Category", "Description", "Amount"]


def render_csv(transactions: List[Dict[str, Any]], names: Optional[Mapping[str, str]] = None) -> str:
    names = names or {}
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADERS)
    for t in sorted(transactions, key=lambda item: str(item.get("date", ""))):
        writer.writerow([
            t["date"],
            t["type"],
            names.get(t.get("category_id"), UNCATEGORIZED),
            t.get("description", ""),
            f"{float(t['amount']):.2f}",
        ])
    return output.getvalue()


def upload_csv(user_id: str, month: str, content: str, report_id: str) -> Optional[str]:
    csv_buffer = io.BytesIO(content.encode())
    s3_key = f"exports/{user_id}/{report_id}.csv"
    try:
        s3.upload_fileobj(csv_buffer, settings.S3_BUCKET_NAME, s3_key, ExtraArgs={"ContentType": "text/csv"})
        return f"https://{settings.S3_BUCKET_NAME}.s3.{settings.S3_REGION}.amazonaws.com/{s3_key}"
    except ClientError as e:
        logger.error(f"Failed to upload CSV export for {user_id} ({month}): {e}")
        return None
