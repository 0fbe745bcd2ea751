"""API routers for the event log backend."""
from fastapi import APIRouter

from . import health, logs


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(logs.router)
    return api_router
