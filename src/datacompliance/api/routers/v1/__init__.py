"""API v1 routers."""

from fastapi import APIRouter

from .audit_trail import router as audit_trail_router
from .users import router as users_router

# Create v1 router that includes all v1 endpoints
router = APIRouter(prefix="/v1")

router.include_router(users_router)
router.include_router(audit_trail_router)

__all__ = ["router", "audit_trail_router", "users_router"]
