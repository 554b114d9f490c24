"""
Registration repository for database operations.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.registration.core.types import RegistrationStatus
from src.database.schema import UdyamRegistration
from .base import BaseRepository


class RegistrationRepository(BaseRepository[UdyamRegistration]):
    """Repository for UdyamRegistration operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(UdyamRegistration, session)

    async def get_by_aadhaar(self, aadhaar_number: str) -> Optional[UdyamRegistration]:
        """
        Get registration by Aadhaar number.

        Args:
            aadhaar_number: 12 digit Aadhaar number

        Returns:
            UdyamRegistration instance or None
        """
        result = await self.session.execute(
            select(UdyamRegistration).where(UdyamRegistration.aadhaar_number == aadhaar_number)
        )
        return result.scalar_one_or_none()

    async def update_mobile(self, registration_id: str, mobile_number: str) -> int:
        """Replace the mobile number of a registration still in step 1."""
        return await self.update_where(
            registration_id,
            UdyamRegistration.step1_completed.is_(False),
            mobile_number=mobile_number,
            updated_at=datetime.utcnow(),
        )

    async def mark_step1_verified(self, registration_id: str) -> int:
        """
        Set otp_verified and step1_completed.

        Returns:
            1 if this call completed step 1, 0 if it was already complete
        """
        return await self.update_where(
            registration_id,
            UdyamRegistration.step1_completed.is_(False),
            otp_verified=True,
            step1_completed=True,
            updated_at=datetime.utcnow(),
        )

    async def claim_step2(self, registration_id: str, business_fields: Dict[str, Any]) -> int:
        """
        Write business details and mark step 2 submitted.

        The WHERE clause makes this a compare-and-swap: among concurrent
        submitters exactly one matches a row.

        Args:
            registration_id: Registration ID
            business_fields: Column name -> value

        Returns:
            1 if this call won the transition, 0 otherwise
        """
        now = datetime.utcnow()
        return await self.update_where(
            registration_id,
            UdyamRegistration.step1_completed.is_(True),
            UdyamRegistration.step2_completed.is_(False),
            **business_fields,
            step2_completed=True,
            registration_status=RegistrationStatus.SUBMITTED.value,
            submitted_at=now,
            updated_at=now,
        )

    async def assign_udyam_number(self, registration_id: str, udyam_number: str) -> int:
        """
        Assign the Udyam number and complete the registration.

        Only matches a submitted registration without a number, so a number
        is never overwritten.
        """
        return await self.update_where(
            registration_id,
            UdyamRegistration.registration_status == RegistrationStatus.SUBMITTED.value,
            UdyamRegistration.udyam_number.is_(None),
            udyam_number=udyam_number,
            registration_status=RegistrationStatus.COMPLETED.value,
            updated_at=datetime.utcnow(),
        )

    async def list_recent(self, limit: int = 100, offset: int = 0) -> List[UdyamRegistration]:
        """
        List registrations, newest first.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            List of UdyamRegistration instances
        """
        result = await self.session.execute(
            select(UdyamRegistration)
            .order_by(UdyamRegistration.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())
