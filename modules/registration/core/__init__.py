"""
Registration core module.

Contains exceptions, state types and pluggable strategies shared by the
orchestrator and the web layer.
"""

from modules.registration.core.exceptions import (
    RegistrationError,
    ValidationFailed,
    InvalidFormat,
    InvalidOtp,
    NotFound,
    DuplicateRegistration,
    PrerequisiteNotMet,
    AlreadyCompleted,
    SchemaCompilationError,
)
from modules.registration.core.types import (
    RegistrationStatus,
    RegistrationStep,
    Step1Initiated,
    Step1Verified,
    Step2Completed,
    Progress,
    RegistrationView,
)
from modules.registration.core.strategies import (
    OtpVerifier,
    IdIssuer,
    DemoOtpVerifier,
    DemoUdyamNumberIssuer,
)

__all__ = [
    'RegistrationError',
    'ValidationFailed',
    'InvalidFormat',
    'InvalidOtp',
    'NotFound',
    'DuplicateRegistration',
    'PrerequisiteNotMet',
    'AlreadyCompleted',
    'SchemaCompilationError',
    'RegistrationStatus',
    'RegistrationStep',
    'Step1Initiated',
    'Step1Verified',
    'Step2Completed',
    'Progress',
    'RegistrationView',
    'OtpVerifier',
    'IdIssuer',
    'DemoOtpVerifier',
    'DemoUdyamNumberIssuer',
]
