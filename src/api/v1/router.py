"""
API v1 router.

Combines all endpoint routers. Every route is rate limited per client.
"""

from fastapi import APIRouter, Depends

from src.api.v1.dependencies.rate_limit import check_rate_limit
from src.api.v1.endpoints import admin, forms, registration

# Create main API router
api_router = APIRouter(dependencies=[Depends(check_rate_limit)])


@api_router.get("/", tags=["info"])
async def api_info():
    """
    API information endpoint.

    Returns:
        API version and available endpoints
    """
    return {
        "title": "Udyam Registration API",
        "version": "1.0.0",
        "endpoints": {
            "step1": ["/step1/initiate", "/step1/verify-otp"],
            "step2": ["/step2/submit"],
            "registration": "/registration/{id}",
            "admin": "/admin/registrations",
            "forms": "/forms/schema",
        }
    }


# Include endpoint routers
api_router.include_router(registration.router)
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(forms.router, prefix="/forms", tags=["forms"])
