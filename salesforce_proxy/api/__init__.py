"""API router."""

from fastapi import APIRouter

from salesforce_proxy.api.endpoints import salesforce

router = APIRouter()

router.include_router(salesforce.router, prefix="/salesforce", tags=["salesforce"])
