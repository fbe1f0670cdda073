"""
API v1 Router
"""

from fastapi import APIRouter

from surtidores.api.v1 import comments, prices, stations

router = APIRouter()

# Include all endpoint routers
router.include_router(prices.router)
router.include_router(comments.router)
router.include_router(stations.router)

__all__ = ["router"]
