from fastapi import APIRouter

from eatoff.api.admin.knowledge_base import router as knowledge_base_router
from eatoff.api.admin.stats import router as stats_router
from eatoff.api.admin.tickets import router as tickets_router

router = APIRouter()
router.include_router(tickets_router)
router.include_router(stats_router)
router.include_router(knowledge_base_router)
