from fastapi import APIRouter
from fastapi.responses import JSONResponse

from lumina.core.config import settings
from lumina.core.database import ping_db

router = APIRouter()


@router.get("/health")
async def health_check():
    database_up = await ping_db()

    return JSONResponse(
        status_code=200 if database_up else 503,
        content={
            "success": database_up,
            "status": "healthy" if database_up else "degraded",
            "database": "up" if database_up else "down",
            "code_store": settings.CODE_STORE_BACKEND
        }
    )
