"""HTTP routes. ``api_router`` collects every endpoint of the service."""

from fastapi import APIRouter

from formgate.api.routes import csrf, endpoint1, endpoint2

api_router = APIRouter()
api_router.include_router(csrf.router)
api_router.include_router(endpoint1.router)
api_router.include_router(endpoint2.router)

__all__ = ["api_router"]
