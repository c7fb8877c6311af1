import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_services
from api.state import Services
from storage import db
from storage.todo_store import PostgresTodoStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/health")
async def health_check(services: Services = Depends(get_services)) -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "OK",
        "message": "Server is running",
        "store": services.store.name,
        "llm_configured": services.llm.configured,
        "search_configured": services.search.configured,
    }

    if isinstance(services.store, PostgresTodoStore):
        db_health = await db.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "DEGRADED"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
