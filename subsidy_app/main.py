"""
Main FastAPI Application for the Subsidy Financing Engine.
Provides REST endpoints for evaluating financing plans.
"""
import logging

from fastapi import FastAPI

from subsidy_app.api.v1 import api_router as v1_router
from subsidy_app.config import get_config

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Subsidy Financing Engine",
    description="Eligibility calculation and cross-validation of housing-subsidy financing plans",
    version="1.0.0"
)

# Include v1 API routes
app.include_router(v1_router)


@app.get("/health")
def health():
    """Liveness check including the loaded configuration version."""
    config = get_config()
    return {
        "status": "ok",
        "config_version": config.version,
        "postal_codes": len(config.postcode_tiers),
    }
