from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from ...core.database import ProductServiceDatabaseManager
from ...core.metrics import render_metrics
from ...core.setting import get_settings
from ..dependencies import DatabaseManagerDep

router = APIRouter()

HEALTH_STATUS_OK = "ok"
HEALTH_STATUS_UNHEALTHY = "unhealthy"


@router.get("/healthz")
async def health_check(
    db_manager: ProductServiceDatabaseManager = DatabaseManagerDep,
) -> JSONResponse:
    """Database reachability check"""
    if await db_manager.ping(timeout=get_settings().DB_PING_TIMEOUT):
        return JSONResponse(status_code=200, content={"status": HEALTH_STATUS_OK})
    return JSONResponse(status_code=503, content={"status": HEALTH_STATUS_UNHEALTHY})


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    body, content_type = render_metrics()
    return Response(content=body, media_type=content_type)
