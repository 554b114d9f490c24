"""
Form schema endpoints.

Serve the scraped field descriptors to the form renderer, so the client
builds its inputs from the same list the server validators were compiled
from.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from modules.registration.schema import FormSchema
from src.api.v1.dependencies.services import get_form_schema

router = APIRouter()


@router.get("/schema")
async def get_schema(schema: FormSchema = Depends(get_form_schema)) -> Dict[str, Any]:
    """Full form schema, all steps."""
    return schema.to_dict()


@router.get("/schema/{step_number}")
async def get_step_schema(
    step_number: int,
    schema: FormSchema = Depends(get_form_schema),
) -> Dict[str, Any]:
    """Descriptors of one step."""
    try:
        return schema.step(step_number).to_dict()
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Form step {step_number} not found"
        )
