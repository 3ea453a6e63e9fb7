"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    codes,
    companies,
    employees,
    enrollment,
    health,
    webhooks,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(companies.router)
api_router.include_router(codes.router)
api_router.include_router(enrollment.router)
api_router.include_router(employees.router)
api_router.include_router(webhooks.router)
