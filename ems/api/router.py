"""
Main API router
"""
from fastapi import APIRouter

from ems.api.v1 import (
    health,
    version,
    auth,
    employees,
    qr,
    visibility,
    requests,
    notifications,
    audit,
    public,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(qr.router, prefix="/employees", tags=["qr"])
api_router.include_router(visibility.router, prefix="/employees", tags=["visibility"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(requests.router, prefix="/requests", tags=["requests"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(audit.router, prefix="/audit-logs", tags=["audit"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
