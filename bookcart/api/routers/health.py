# bookcart/api/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookcart.data.database import get_db
from bookcart.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Database ping failed: {e}")
        database = "unavailable"

    return {
        "status": "OK" if database == "ok" else "DEGRADED",
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
