"""
Shared fixtures.

Each test gets its own SQLite file so concurrent sessions see real
locking behaviour (an in-memory database is per connection).
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
import pytest_asyncio

from modules.registration.orchestrator import StepOrchestrator
from modules.registration.schema import load_form_schema
from modules.registration.validation import compile_step_validators
from src.database.connection import build_engine, build_session_maker, create_tables

FORM_SCHEMA_FILE = project_root / "config" / "forms" / "udyam_form_schema.json"

VALID_STEP1 = {"aadhaarNumber": "123456789012", "mobileNumber": "9876543210"}

VALID_STEP2 = {
    "panNumber": "ABCDE1234F",
    "businessName": "Test Business",
    "ownerName": "John Doe",
    "dateOfBirth": "1990-01-01",
    "gender": "Male",
    "socialCategory": "General",
    "physicallyHandicapped": False,
    "exServiceman": False,
}


class FixedOtpVerifier:
    """Issues one known code and accepts only that code."""

    def __init__(self, code: str = "424242"):
        self.code = code

    def issue(self, registration_id: str) -> str:
        return self.code

    def verify(self, registration_id: str, code: str) -> bool:
        return code == self.code


class SequentialIssuer:
    """Deterministic Udyam numbers for assertions."""

    def __init__(self):
        self.issued = []

    def issue(self) -> str:
        number = f"UDYAM-TEST-{len(self.issued) + 1:04d}"
        self.issued.append(number)
        return number


@pytest.fixture(scope="session")
def form_schema():
    return load_form_schema(FORM_SCHEMA_FILE)


@pytest.fixture(scope="session")
def validators(form_schema):
    return compile_step_validators(form_schema)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'registrations.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
def issuer():
    return SequentialIssuer()


@pytest.fixture
def orchestrator(session_maker, validators, issuer):
    return StepOrchestrator(session_maker, validators, id_issuer=issuer)
