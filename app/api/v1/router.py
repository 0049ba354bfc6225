"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import disputes

api_router = APIRouter()

# Disputes
api_router.include_router(disputes.router, prefix="/disputes", tags=["Disputes"])
