from fastapi import APIRouter

from .health import router as health_router
from .records import router as records_router
from .summaries import router as summaries_router


router = APIRouter()
router.include_router(health_router)
router.include_router(summaries_router)
router.include_router(records_router)
