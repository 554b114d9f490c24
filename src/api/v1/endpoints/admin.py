"""
Admin API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from modules.registration.orchestrator import StepOrchestrator
from src.api.v1.dependencies.auth import verify_api_key
from src.api.v1.dependencies.services import get_orchestrator
from src.api.v1.models.responses import RegistrationListResponse

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/registrations", response_model=RegistrationListResponse)
async def list_registrations(
    request: Request,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
):
    """
    List registrations, newest first.

    Business fields, status and timestamps only; Aadhaar and mobile
    numbers are excluded.
    """
    settings = request.app.state.api_settings
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    registrations = await orchestrator.list_registrations(limit=limit, offset=offset)
    return {"registrations": registrations}
