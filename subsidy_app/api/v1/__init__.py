"""
API v1 - REST endpoints for the financing engine.

Implements:
- Financing endpoints (evaluate, field requirements, tier and variant lookups)
"""
from fastapi import APIRouter

from .financing import router as financing_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(financing_router, prefix="/financing", tags=["Financing"])
