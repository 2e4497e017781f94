from fastapi import APIRouter, Request, Response
from fastapi import status as http_status

from shikshan.api.v1.monitoring.service import check_health, get_migrations
from shikshan.core.schemas import HealthResponse, MigrationStatus

router = APIRouter(prefix="/api/v1/monitoring", tags=["monitoring"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, response: Response) -> HealthResponse:
    """Database and migration health. Returns 503 while degraded."""
    result = await check_health(request.app.state.engine)
    if result.status != "healthy":
        response.status_code = http_status.HTTP_503_SERVICE_UNAVAILABLE
    return result


@router.get("/migrations", response_model=MigrationStatus)
async def migrations(request: Request) -> MigrationStatus:
    """Applied and pending schema migrations."""
    return await get_migrations(request.app.state.engine)
