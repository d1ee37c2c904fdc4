"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.activity import router as activity_router
from api.v1.routes.admin_properties import router as admin_properties_router
from api.v1.routes.invitations import router as invitations_router
from api.v1.routes.properties import router as properties_router
from api.v1.routes.trust_levels import router as trust_levels_router

router = APIRouter()
router.include_router(properties_router)
router.include_router(admin_properties_router)
router.include_router(invitations_router)
router.include_router(trust_levels_router)
router.include_router(activity_router)
