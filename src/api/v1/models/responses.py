"""
API response models.

Pydantic models for API responses. Attributes are snake_case and
serialized as camelCase.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(CamelResponse):
    """
    Standard error response.
    """

    error: str = Field(..., description="Human-readable error message")
    details: Optional[List[FieldErrorDetail]] = Field(default=None, description="Field level errors")
    registration_id: Optional[str] = Field(default=None, description="Existing registration, for duplicates")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Validation failed",
                "details": [
                    {"field": "aadhaarNumber", "message": "Aadhaar Number must be exactly 12 characters"}
                ],
            }
        }
    )


class Step1InitiateResponse(CamelResponse):
    message: str = "Registration initiated successfully"
    registration_id: str
    step: int = 1
    demo_otp: Optional[str] = Field(
        default=None,
        alias="demoOTP",
        description="Demo mode only: the issued code, standing in for an SMS",
    )


class VerifyOtpResponse(CamelResponse):
    message: str = "OTP verified successfully"
    registration_id: str
    step1_completed: bool = True
    can_proceed_to_step2: bool = True


class Step2SubmitResponse(CamelResponse):
    message: str = "Registration completed successfully"
    registration_id: str
    udyam_number: str
    step2_completed: bool = True
    registration_status: str = "COMPLETED"


class ProgressResponse(BaseModel):
    step1: bool
    step2: bool
    total: int


class RegistrationStatusResponse(BaseModel):
    registration: Dict[str, Any]
    progress: ProgressResponse


class RegistrationListResponse(BaseModel):
    registrations: List[Dict[str, Any]]
