"""
API v1 request and response models.
"""

from src.api.v1.models.requests import Step1InitiateRequest, VerifyOtpRequest, Step2SubmitRequest
from src.api.v1.models.responses import (
    ErrorResponse,
    Step1InitiateResponse,
    VerifyOtpResponse,
    Step2SubmitResponse,
    RegistrationStatusResponse,
    RegistrationListResponse,
)

__all__ = [
    "Step1InitiateRequest",
    "VerifyOtpRequest",
    "Step2SubmitRequest",
    "ErrorResponse",
    "Step1InitiateResponse",
    "VerifyOtpResponse",
    "Step2SubmitResponse",
    "RegistrationStatusResponse",
    "RegistrationListResponse",
]
