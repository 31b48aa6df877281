"""
Health Check Router
Liveness and AWS connectivity checks
"""
from fastapi import APIRouter
from datetime import datetime
import logging
from botocore.exceptions import ClientError

from finance_tracker.core.config import settings
from finance_tracker.db import dynamo
from finance_tracker.utils import export

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.utcnow().isoformat()
    }


def _table_status(name: str, table) -> dict:
    try:
        table.scan(Limit=1)
        return {"name": name, "status": "accessible", "region": settings.DYNAMO_REGION}
    except Exception as e:
        logger.error(f"DynamoDB check failed for {name}: {str(e)}")
        return {"name": name, "status": "error", "error": str(e)}


@router.get("/status")
def aws_services_status():
    """
    Check connectivity of the DynamoDB tables and the S3 export bucket.
    """
    status = {
        "timestamp": datetime.utcnow().isoformat(),
        "services": {}
    }

    tables = {
        "transactions": _table_status(settings.DYNAMO_TABLE_TRANSACTIONS, dynamo.transactions_table),
        "categories": _table_status(settings.DYNAMO_TABLE_CATEGORIES, dynamo.categories_table),
        "budgets": _table_status(settings.DYNAMO_TABLE_BUDGETS, dynamo.budgets_table),
        "profiles": _table_status(settings.DYNAMO_TABLE_PROFILES, dynamo.profiles_table),
    }
    status["services"]["dynamodb"] = {
        "connected": all(table["status"] == "accessible" for table in tables.values()),
        "tables": tables,
    }

    s3_status = {
        "connected": False,
        "bucket": settings.S3_BUCKET_NAME,
        "region": settings.S3_REGION,
        "error": None
    }
    try:
        export.s3.head_bucket(Bucket=settings.S3_BUCKET_NAME)
        s3_status["connected"] = True
        s3_status["status"] = "accessible"
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        s3_status["error"] = f"{error_code}: {str(e)}"
        s3_status["status"] = "error"
        logger.error(f"S3 check failed: {str(e)}")
    except Exception as e:
        s3_status["error"] = str(e)
        s3_status["status"] = "error"
        logger.error(f"S3 check failed: {str(e)}")

    status["services"]["s3"] = s3_status

    all_connected = all(
        service.get("connected", False)
        for service in status["services"].values()
    )
    status["overall_status"] = "healthy" if all_connected else "degraded"

    return status
