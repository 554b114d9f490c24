"""
Registration API endpoints.

Step 1 (Aadhaar + OTP), step 2 (business details) and registration status.
Failures are raised as RegistrationError subclasses and rendered by the
application's exception handler.
"""

from fastapi import APIRouter, Depends

from modules.registration.orchestrator import StepOrchestrator
from src.api.v1.dependencies.services import get_orchestrator
from src.api.v1.models.requests import Step1InitiateRequest, Step2SubmitRequest, VerifyOtpRequest
from src.api.v1.models.responses import (
    ErrorResponse,
    RegistrationStatusResponse,
    Step1InitiateResponse,
    Step2SubmitResponse,
    VerifyOtpResponse,
)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation or state error"},
    404: {"model": ErrorResponse, "description": "Registration not found"},
}


@router.post(
    "/step1/initiate",
    response_model=Step1InitiateResponse,
    response_model_exclude_none=True,
    responses={400: ERROR_RESPONSES[400]},
    tags=["step1"],
)
async def initiate_step1(
    body: Step1InitiateRequest,
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
):
    """
    Start step 1 with Aadhaar and mobile numbers.

    Re-submitting the same Aadhaar before verification updates the mobile
    number and returns the same registration id. In demo mode the issued
    code is returned as ``demoOTP`` (no SMS is sent).
    """
    started = await orchestrator.initiate_step1(body.to_payload())

    return Step1InitiateResponse(
        registration_id=started.registration_id,
        step=started.step,
        demo_otp=started.demo_otp,
    )


@router.post(
    "/step1/verify-otp",
    response_model=VerifyOtpResponse,
    responses=ERROR_RESPONSES,
    tags=["step1"],
)
async def verify_otp(
    body: VerifyOtpRequest,
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
):
    """
    Verify the step 1 code and complete step 1.
    """
    verified = await orchestrator.verify_otp(body.registration_id, body.otp)

    return VerifyOtpResponse(
        registration_id=verified.registration_id,
        step1_completed=verified.step1_completed,
        can_proceed_to_step2=verified.can_proceed_to_step2,
    )


@router.post(
    "/step2/submit",
    response_model=Step2SubmitResponse,
    responses=ERROR_RESPONSES,
    tags=["step2"],
)
async def submit_step2(
    body: Step2SubmitRequest,
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
):
    """
    Submit business details and complete the registration.
    """
    completed = await orchestrator.submit_step2(body.registration_id, body.to_payload())

    return Step2SubmitResponse(
        registration_id=completed.registration_id,
        udyam_number=completed.udyam_number,
        step2_completed=completed.step2_completed,
        registration_status=completed.registration_status.value,
    )


@router.get(
    "/registration/{registration_id}",
    response_model=RegistrationStatusResponse,
    responses={404: ERROR_RESPONSES[404]},
    tags=["registration"],
)
async def get_registration(
    registration_id: str,
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
):
    """
    Get registration progress. Aadhaar and mobile numbers are not returned.
    """
    view = await orchestrator.get_status(registration_id)
    return view.to_dict()
