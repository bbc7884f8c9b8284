"""API Routes."""

from fastapi import APIRouter

from .articles import router as articles_router
from .auth import router as auth_router
from .billing import router as billing_router
from .contact import router as contact_router
from .health import router as health_router
from .publishers import router as publishers_router
from .stats import router as stats_router
from .users import router as users_router

# Create main API router
api_router = APIRouter()

# Include route modules
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(articles_router)
api_router.include_router(publishers_router)
api_router.include_router(billing_router)
api_router.include_router(stats_router)
# Last: owns the catch-all PATCH /{message_id}
api_router.include_router(contact_router)
