from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.idvault.api.http.deps import get_database_service
from src.idvault.core.services import DbSessionService

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: DbSessionService = Depends(get_database_service)) -> JSONResponse:
    """Liveness plus database connectivity."""
    if db.health_check():
        return JSONResponse({"status": "healthy", "database": "connected"})
    return JSONResponse(
        {"status": "unhealthy", "database": "disconnected"}, status_code=503
    )
