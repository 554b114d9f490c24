"""
Custom exceptions for the registration module.

Every recoverable failure is a RegistrationError carrying the HTTP status
the web layer should answer with. SchemaCompilationError is deliberately
outside that hierarchy: it is raised at startup only and must stop the
process.
"""

from typing import Any, Dict, List, Optional


class RegistrationError(Exception):
    """Base exception for registration operations."""

    status_code: int = 400
    error: str = "Registration request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.error
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error body returned to clients."""
        return {"error": self.message}


class ValidationFailed(RegistrationError):
    """Raised when a submission is rejected by a step validator."""

    error = "Validation failed"

    def __init__(self, errors: List[Any], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "details": [e.to_dict() for e in self.errors],
        }


class InvalidFormat(RegistrationError):
    """Raised when the verification code is not a 6 digit string."""

    error = "Invalid OTP format. OTP must be 6 digits."


class InvalidOtp(RegistrationError):
    """Raised when a well formed verification code is rejected."""

    error = "Invalid OTP"


class NotFound(RegistrationError):
    """Raised when the registration id is unknown."""

    status_code = 404
    error = "Registration not found"


class DuplicateRegistration(RegistrationError):
    """Raised when step 1 is initiated for an Aadhaar that already completed it."""

    error = "Registration already exists for this Aadhaar number"

    def __init__(self, registration_id: str, message: Optional[str] = None):
        self.registration_id = registration_id
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "registrationId": self.registration_id}


class PrerequisiteNotMet(RegistrationError):
    """Raised when step 2 is submitted before step 1 is verified."""

    error = "Step 1 must be completed before proceeding to Step 2"


class AlreadyCompleted(RegistrationError):
    """Raised when a step that already completed is attempted again."""

    error = "Step already completed"


class SchemaCompilationError(Exception):
    """Raised when a form schema is malformed. Fatal at startup."""
    pass
