from fastapi import APIRouter

from core.config import settings
from utils.dates import utcnow


router = APIRouter()


@router.get("/")
async def index():
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "users": f"{settings.API_V1_STR}/users",
            "admin": f"{settings.API_V1_STR}/admin",
            "health": "/health",
        },
    }


@router.get("/health")
async def health():
    return {
        "status": "OK",
        "message": "Webinar API is running",
        "timestamp": utcnow().isoformat(),
    }
