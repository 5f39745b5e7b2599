"""
Health Check Router
Liveness and DynamoDB reachability
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import logging

from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.dependencies import get_store
from app.utils.ledger import LedgerStore

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
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/status")
def dynamodb_status(store: LedgerStore = Depends(get_store)):
    """
    Check that each ledger table can be read.
    """
    status = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "region": settings.DYNAMO_REGION,
        "tables": {},
    }

    for name, table in store.gateway.tables.items():
        try:
            table.scan(Limit=1)
            status["tables"][name] = {"name": table.name, "status": "accessible"}
        except (ClientError, BotoCoreError) as e:
            status["tables"][name] = {"name": table.name, "status": "error", "error": str(e)}
            logger.error(f"DynamoDB check for {name} failed: {str(e)}")

    all_accessible = all(t["status"] == "accessible" for t in status["tables"].values())
    status["overall_status"] = "healthy" if all_accessible else "degraded"
    return status
