"""API routes."""

from fastapi import APIRouter

from observatory.api.routes import observability

api_router = APIRouter()

api_router.include_router(observability.router, prefix="/observability", tags=["observability"])
