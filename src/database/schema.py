"""
SQLAlchemy models for all database tables.
"""

from datetime import datetime
from uuid import uuid4
from typing import Any, Dict

from sqlalchemy import Boolean, DateTime, String, Index
from sqlalchemy.orm import Mapped, mapped_column

from modules.registration.core.types import RegistrationStatus, isoformat
from .connection import Base


def generate_uuid() -> str:
    """Generate UUID as string"""
    return str(uuid4())


# Request field key -> column for the step 2 business details
BUSINESS_FIELD_COLUMNS: Dict[str, str] = {
    "panNumber": "pan_number",
    "businessName": "business_name",
    "ownerName": "owner_name",
    "dateOfBirth": "date_of_birth",
    "gender": "gender",
    "socialCategory": "social_category",
    "physicallyHandicapped": "physically_handicapped",
    "exServiceman": "ex_serviceman",
}


class UdyamRegistration(Base):
    """One applicant's progress through the two step registration."""

    __tablename__ = "udyam_registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    # Step 1 identity
    aadhaar_number: Mapped[str] = mapped_column(String(12), unique=True, nullable=False, index=True)
    mobile_number: Mapped[str] = mapped_column(String(10), nullable=False)

    # Progress flags, never reset once true
    step1_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    otp_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    step2_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Step 2 business details, null until step 2 succeeds
    pan_number: Mapped[str | None] = mapped_column(String(10))
    business_name: Mapped[str | None] = mapped_column(String(100))
    owner_name: Mapped[str | None] = mapped_column(String(100))
    date_of_birth: Mapped[str | None] = mapped_column(String(32))
    gender: Mapped[str | None] = mapped_column(String(20))
    social_category: Mapped[str | None] = mapped_column(String(20))
    physically_handicapped: Mapped[bool | None] = mapped_column(Boolean)
    ex_serviceman: Mapped[bool | None] = mapped_column(Boolean)

    registration_status: Mapped[str] = mapped_column(
        String(20), default=RegistrationStatus.PENDING.value, nullable=False, index=True
    )  # PENDING, SUBMITTED, COMPLETED
    udyam_number: Mapped[str | None] = mapped_column(String(40), unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime)

    __table_args__ = (
        Index("idx_udyam_registrations_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<UdyamRegistration(id={self.id}, status={self.registration_status}, "
            f"step1={self.step1_completed}, step2={self.step2_completed})>"
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary without the Aadhaar and mobile numbers."""
        return {
            "id": self.id,
            "step1Completed": self.step1_completed,
            "otpVerified": self.otp_verified,
            "step2Completed": self.step2_completed,
            "panNumber": self.pan_number,
            "businessName": self.business_name,
            "ownerName": self.owner_name,
            "dateOfBirth": self.date_of_birth,
            "gender": self.gender,
            "socialCategory": self.social_category,
            "physicallyHandicapped": self.physically_handicapped,
            "exServiceman": self.ex_serviceman,
            "registrationStatus": self.registration_status,
            "udyamNumber": self.udyam_number,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
            "submittedAt": isoformat(self.submitted_at),
        }

    def to_admin_dict(self) -> Dict[str, Any]:
        """Admin listing row: business fields, status and timestamps."""
        return {
            "id": self.id,
            "businessName": self.business_name,
            "ownerName": self.owner_name,
            "panNumber": self.pan_number,
            "registrationStatus": self.registration_status,
            "udyamNumber": self.udyam_number,
            "step1Completed": self.step1_completed,
            "step2Completed": self.step2_completed,
            "createdAt": isoformat(self.created_at),
            "submittedAt": isoformat(self.submitted_at),
        }
