import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.api import api_router
from app.features.health.routes.health import router as health_router
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

app = FastAPI(
    title="LeadDesk API",
    description="Lead management, spreadsheet ingestion and referral tracking",
    version="1.0.0",
    debug=settings.DEBUG,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "LeadDesk API",
        "description": "Lead ingestion, outreach and referral tracking backend.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api")
