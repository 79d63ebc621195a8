from fastapi import APIRouter

from app.features.compose.routes.compose import router as compose_router
from app.features.leads.routes.lead_route import router as leads_router
from app.features.referral.routes.referral import router as referral_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(leads_router)
api_router.include_router(referral_router)
api_router.include_router(compose_router)
