from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from common.db.scoped import get_session
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check():
    # Liveness only; probes hit this every few seconds
    return {"status": "healthy", "service": "subscription-engine"}


@router.get("/db")
async def db_check():
    """Readiness: the read path can reach the database."""
    try:
        async with get_session(readonly=True) as session:
            await session.scalar(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unreachable"},
        )
    return {"status": "healthy", "database": "connected"}
