"""
Liveness endpoint for load balancers and uptime checks.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter
from sqlalchemy import text

from app.db.session import SessionLocal
from app.services.storage_service import get_bucket_root

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

API_VERSION = "1.0.0"


def _database_status() -> str:
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return "connected"
    except Exception as e:
        logger.error(f"Health check: database unreachable: {e}")
        return "unreachable"
    finally:
        db.close()


def _storage_status() -> str:
    root = get_bucket_root()
    if not root.exists():
        # Created on first upload
        return "empty"
    return "ok" if root.is_dir() else "misconfigured"


@router.get("")
def health_check():
    """
    Always 200 while the process is serving; ``status`` drops to "degraded"
    when the database cannot be reached or the résumé bucket is unusable.
    """
    database = _database_status()
    storage = _storage_status()
    healthy = database == "connected" and storage != "misconfigured"

    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
        "storage": storage,
        "version": API_VERSION,
    }
