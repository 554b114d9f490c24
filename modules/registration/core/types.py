"""
Shared types for the registration state machine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class RegistrationStatus(str, Enum):
    """Persisted registration status. Moves forward only."""
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    COMPLETED = "COMPLETED"


class RegistrationStep(str, Enum):
    """Position of a record in the two step flow."""
    NEW = "NEW"
    STEP1_INITIATED = "STEP1_INITIATED"
    STEP1_VERIFIED = "STEP1_VERIFIED"
    STEP2_SUBMITTED = "STEP2_SUBMITTED"
    COMPLETED = "COMPLETED"

    @classmethod
    def of(cls, record: Any) -> "RegistrationStep":
        """Derive the step from a record's completion flags."""
        if record is None:
            return cls.NEW
        if record.udyam_number and record.registration_status == RegistrationStatus.COMPLETED.value:
            return cls.COMPLETED
        if record.step2_completed:
            return cls.STEP2_SUBMITTED
        if record.step1_completed:
            return cls.STEP1_VERIFIED
        return cls.STEP1_INITIATED


@dataclass(frozen=True)
class Step1Initiated:
    registration_id: str
    created: bool
    step: int = 1
    demo_otp: Optional[str] = None


@dataclass(frozen=True)
class Step1Verified:
    registration_id: str
    step1_completed: bool = True
    can_proceed_to_step2: bool = True


@dataclass(frozen=True)
class Step2Completed:
    registration_id: str
    udyam_number: str
    registration_status: RegistrationStatus = RegistrationStatus.COMPLETED
    step2_completed: bool = True


@dataclass(frozen=True)
class Progress:
    """Coarse progress indicator: 0, 50 or 100."""
    step1: bool
    step2: bool

    @property
    def total(self) -> int:
        if self.step2:
            return 100
        if self.step1:
            return 50
        return 0

    def to_dict(self) -> Dict[str, Any]:
        return {"step1": self.step1, "step2": self.step2, "total": self.total}


@dataclass(frozen=True)
class RegistrationView:
    """Redacted registration snapshot, identity numbers stripped."""
    registration: Dict[str, Any]
    progress: Progress
    step: RegistrationStep = field(default=RegistrationStep.NEW)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "registration": self.registration,
            "progress": self.progress.to_dict(),
        }


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """ISO format a timestamp, passing None through."""
    return value.isoformat() if value else None
