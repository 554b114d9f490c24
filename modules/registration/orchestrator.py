"""
StepOrchestrator - the two step registration state machine.

States, derived from the persisted flags:

    NEW -> STEP1_INITIATED -> STEP1_VERIFIED -> STEP2_SUBMITTED -> COMPLETED

Each public operation is one unit of work on a fresh session and re-reads
the registration before mutating it. The orchestrator keeps no per-record
state between calls; the compiled validators and strategies it holds are
read-only.
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.registration.core.exceptions import (
    AlreadyCompleted,
    DuplicateRegistration,
    InvalidFormat,
    InvalidOtp,
    NotFound,
    PrerequisiteNotMet,
    ValidationFailed,
)
from modules.registration.core.strategies import (
    DemoOtpVerifier,
    DemoUdyamNumberIssuer,
    IdIssuer,
    OtpVerifier,
)
from modules.registration.core.types import (
    Progress,
    RegistrationStatus,
    RegistrationStep,
    RegistrationView,
    Step1Initiated,
    Step1Verified,
    Step2Completed,
)
from modules.registration.validation.compiler import OTP_KEY, StepValidators
from modules.registration.validation.core.base import FieldError
from src.database.connection import get_session
from src.database.repositories.registration_repository import RegistrationRepository
from src.database.schema import BUSINESS_FIELD_COLUMNS, UdyamRegistration
from shared.utils.logger import setup_logger, mask_identifier

logger = setup_logger(__name__)


class StepOrchestrator:
    """
    Sequences step 1 (identity) and step 2 (business details).

    Usage:
        orchestrator = StepOrchestrator(session_maker, validators)

        started = await orchestrator.initiate_step1({"aadhaarNumber": ..., "mobileNumber": ...})
        await orchestrator.verify_otp(started.registration_id, "123456")
        done = await orchestrator.submit_step2(started.registration_id, business_details)
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        validators: StepValidators,
        otp_verifier: Optional[OtpVerifier] = None,
        id_issuer: Optional[IdIssuer] = None,
        demo_mode: bool = True,
    ):
        """
        Initialize orchestrator.

        Args:
            session_maker: Session factory for the registration store
            validators: Compiled step validators
            otp_verifier: Verification code strategy (demo verifier by default)
            id_issuer: Udyam number strategy (demo issuer by default)
            demo_mode: Echo issued codes back to the caller
        """
        self.session_maker = session_maker
        self.validators = validators
        self.otp_verifier = otp_verifier or DemoOtpVerifier()
        self.id_issuer = id_issuer or DemoUdyamNumberIssuer()
        self.demo_mode = demo_mode

    # ------------------------------------------------------------------
    # Step 1
    # ------------------------------------------------------------------

    async def initiate_step1(self, payload: Optional[Mapping[str, Any]]) -> Step1Initiated:
        """
        Start (or restart) step 1 for an Aadhaar number.

        Re-initiating before step 1 completes updates the mobile number of
        the existing registration and returns the same id. The new mobile
        number is not checked against other registrations.

        Raises:
            ValidationFailed: Aadhaar or mobile number rejected
            DuplicateRegistration: Step 1 already completed for this Aadhaar
        """
        result = self.validators.step1.validate(payload)
        if not result.passed:
            logger.warning(f"Step 1 initiation rejected: {[e.field for e in result.errors]}")
            raise ValidationFailed(result.errors)

        aadhaar_number = result.record["aadhaarNumber"]
        mobile_number = result.record["mobileNumber"]

        try:
            registration_id, created = await self._upsert_step1(aadhaar_number, mobile_number)
        except IntegrityError:
            # A concurrent request created the row first; take the update path
            logger.info(f"Concurrent step 1 creation for {mask_identifier(aadhaar_number)}, retrying")
            registration_id, created = await self._upsert_step1(aadhaar_number, mobile_number)

        code = self.otp_verifier.issue(registration_id)
        return Step1Initiated(
            registration_id=registration_id,
            created=created,
            demo_otp=code if self.demo_mode else None,
        )

    async def _upsert_step1(self, aadhaar_number: str, mobile_number: str):
        async with get_session(self.session_maker) as session:
            repo = RegistrationRepository(session)
            existing = await repo.get_by_aadhaar(aadhaar_number)

            if existing is not None:
                if existing.step1_completed or not await repo.update_mobile(existing.id, mobile_number):
                    logger.warning(
                        f"Duplicate registration for {mask_identifier(aadhaar_number)}: {existing.id}"
                    )
                    raise DuplicateRegistration(existing.id)

                logger.info(f"Step 1 re-initiated for registration {existing.id}")
                return existing.id, False

            registration = await repo.create(
                aadhaar_number=aadhaar_number,
                mobile_number=mobile_number,
                step1_completed=False,
                otp_verified=False,
                step2_completed=False,
                registration_status=RegistrationStatus.PENDING.value,
            )
            logger.info(
                f"Step 1 initiated: registration {registration.id} "
                f"for {mask_identifier(aadhaar_number)}"
            )
            return registration.id, True

    async def verify_otp(self, registration_id: Optional[str], otp: Any) -> Step1Verified:
        """
        Verify the step 1 code and complete step 1.

        Raises:
            ValidationFailed: Registration id missing
            InvalidFormat: Code is not a 6 digit string
            NotFound: Unknown registration id
            AlreadyCompleted: Step 1 already completed
            InvalidOtp: The verifier rejected the code
        """
        self._require_id(registration_id)

        if not self.validators.otp.validate({OTP_KEY: otp}).passed:
            raise InvalidFormat()

        async with get_session(self.session_maker) as session:
            repo = RegistrationRepository(session)
            registration = await self._fetch(repo, registration_id)

            if registration.step1_completed:
                raise AlreadyCompleted("Step 1 already completed")

            if not self.otp_verifier.verify(registration_id, otp):
                logger.warning(f"OTP rejected for registration {registration_id}")
                raise InvalidOtp()

            if not await repo.mark_step1_verified(registration_id):
                raise AlreadyCompleted("Step 1 already completed")

        logger.info(f"Step 1 verified for registration {registration_id}")
        return Step1Verified(registration_id=registration_id)

    # ------------------------------------------------------------------
    # Step 2
    # ------------------------------------------------------------------

    async def submit_step2(
        self,
        registration_id: Optional[str],
        payload: Optional[Mapping[str, Any]],
    ) -> Step2Completed:
        """
        Validate and store business details, then issue the Udyam number.

        The submitted-state write and the Udyam number assignment share one
        transaction, so no reader sees SUBMITTED with a number or COMPLETED
        without one. The submitted-state write only matches a registration
        whose step 2 is still open, so concurrent submissions produce one
        winner and AlreadyCompleted for the rest.

        Raises:
            ValidationFailed: Registration id missing or details rejected
            NotFound: Unknown registration id
            PrerequisiteNotMet: Step 1 not completed
            AlreadyCompleted: Step 2 already completed
        """
        self._require_id(registration_id)

        async with get_session(self.session_maker) as session:
            repo = RegistrationRepository(session)
            registration = await self._fetch(repo, registration_id)
            self._check_step2_open(registration)

            result = self.validators.step2.validate(payload)
            if not result.passed:
                logger.warning(
                    f"Step 2 rejected for registration {registration_id}: "
                    f"{[e.field for e in result.errors]}"
                )
                raise ValidationFailed(result.errors)

            columns = self._business_columns(result.record)

            if not await repo.claim_step2(registration_id, columns):
                # Lost a race: report the state that beat us
                current = await repo.refresh_by_id(registration_id)
                self._check_step2_open(current)
                raise AlreadyCompleted("Step 2 already completed")

            udyam_number = self.id_issuer.issue()
            if not await repo.assign_udyam_number(registration_id, udyam_number):
                raise AlreadyCompleted("Step 2 already completed")

        logger.info(f"Registration {registration_id} completed with {udyam_number}")
        return Step2Completed(registration_id=registration_id, udyam_number=udyam_number)

    @staticmethod
    def _check_step2_open(registration: Optional[UdyamRegistration]) -> None:
        if registration is None:
            raise NotFound()
        if not registration.step1_completed:
            raise PrerequisiteNotMet()
        if registration.step2_completed:
            raise AlreadyCompleted("Step 2 already completed")

    @staticmethod
    def _business_columns(record: Mapping[str, Any]) -> Dict[str, Any]:
        columns = {}
        for key, value in record.items():
            column = BUSINESS_FIELD_COLUMNS.get(key)
            if column is None:
                logger.debug(f"No column for step 2 field '{key}', not stored")
                continue
            columns[column] = value
        return columns

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_status(self, registration_id: str) -> RegistrationView:
        """
        Get a redacted view of a registration with its progress.

        Raises:
            NotFound: Unknown registration id
        """
        async with get_session(self.session_maker) as session:
            registration = await self._fetch(RegistrationRepository(session), registration_id)

            return RegistrationView(
                registration=registration.to_public_dict(),
                progress=Progress(
                    step1=registration.step1_completed,
                    step2=registration.step2_completed,
                ),
                step=RegistrationStep.of(registration),
            )

    async def list_registrations(self, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """List registrations for administrators, identity numbers excluded."""
        async with get_session(self.session_maker) as session:
            rows = await RegistrationRepository(session).list_recent(limit=limit, offset=offset)
            return [row.to_admin_dict() for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_id(registration_id: Optional[str]) -> None:
        if not registration_id or not isinstance(registration_id, str):
            raise ValidationFailed(
                [FieldError(field="registrationId", message="Registration ID is required")]
            )

    @staticmethod
    async def _fetch(repo: RegistrationRepository, registration_id: str) -> UdyamRegistration:
        registration = await repo.get_by_id(registration_id)
        if registration is None:
            raise NotFound()
        return registration
