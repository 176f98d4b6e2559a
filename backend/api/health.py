"""GET /api/health — system dependency check."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.deps import Services, get_services
from config import settings
from core.errors import DatabaseError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(services: Services = Depends(get_services)):
    model_status = _check_model_gateway(services)
    db_status    = _check_database(services)
    overall = "ok" if model_status["status"] == "up" and db_status["status"] in ("up", "unconfigured") else "degraded"
    return {
        "status": overall,
        "services": {
            "model":    model_status,
            "database": db_status,
        },
    }


def _check_model_gateway(services: Services) -> dict:
    healthy, detail = services.gateway.is_healthy()
    if healthy:
        return {"status": "up", "model": detail}
    return {"status": "down", "error": detail}


def _check_database(services: Services) -> dict:
    if not settings.DATA_DB_URL:
        return {"status": "unconfigured"}
    try:
        with services.registry.get(settings.DATA_DB_URL).connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "up"}
    except (SQLAlchemyError, DatabaseError) as e:
        logger.warning("Database health check failed: %s", e)
        return {"status": "down", "error": str(e)}
