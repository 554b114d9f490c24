"""
Service dependencies.

Hand the objects built by the application factory to endpoints.
"""

from fastapi import Request

from modules.registration.orchestrator import StepOrchestrator
from modules.registration.schema import FormSchema


def get_orchestrator(request: Request) -> StepOrchestrator:
    """Registration state machine for this application."""
    return request.app.state.orchestrator


def get_form_schema(request: Request) -> FormSchema:
    """Form schema the validators were compiled from."""
    return request.app.state.form_schema
