"""
API request models.

Field formats are NOT checked here: the compiled form validators own
those rules so the API and the form renderer share one source. These
models only fix the JSON shape (and feed the OpenAPI docs).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional


class CamelModel(BaseModel):
    """Base model reading camelCase JSON into snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Step1InitiateRequest(CamelModel):
    """Start step 1 with identity numbers."""

    aadhaar_number: Optional[str] = Field(default=None, description="12 digit Aadhaar number")
    mobile_number: Optional[str] = Field(default=None, description="10 digit mobile number")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"aadhaarNumber": "123456789012", "mobileNumber": "9876543210"}
        }
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class VerifyOtpRequest(CamelModel):
    """Verify the step 1 code."""

    registration_id: Optional[str] = Field(default=None, description="Id returned by /step1/initiate")
    otp: Optional[str] = Field(default=None, description="6 digit verification code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"registrationId": "7f0c7c2e-...", "otp": "123456"}
        }
    )


class Step2SubmitRequest(CamelModel):
    """
    Business details for step 2.

    Extra keys are kept so fields added to the scraped schema reach the
    validator without a model change.
    """

    registration_id: Optional[str] = Field(default=None, description="Id returned by /step1/initiate")
    pan_number: Optional[str] = None
    business_name: Optional[str] = None
    owner_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    social_category: Optional[str] = None
    physically_handicapped: Optional[bool] = None
    ex_serviceman: Optional[bool] = None

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "registrationId": "7f0c7c2e-...",
                "panNumber": "ABCDE1234F",
                "businessName": "Test Business",
                "ownerName": "John Doe",
                "dateOfBirth": "1990-01-01",
                "gender": "Male",
                "socialCategory": "General",
                "physicallyHandicapped": False,
                "exServiceman": False,
            }
        }
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"registration_id"})
