"""
Pluggable verification and number issuing strategies.

The demo implementations are NOT production stand-ins for an SMS gateway
or the Udyam number authority:

- DemoOtpVerifier issues a random 6 digit code and accepts any well formed
  code on verification.
- DemoUdyamNumberIssuer fabricates a number from the current timestamp.

A real deployment substitutes its own OtpVerifier / IdIssuer when building
the StepOrchestrator; the state machine does not change.
"""

import re
import secrets
import time
from typing import Protocol, runtime_checkable

OTP_PATTERN = re.compile(r"^[0-9]{6}$")


@runtime_checkable
class OtpVerifier(Protocol):
    """Issues and checks step 1 verification codes."""

    def issue(self, registration_id: str) -> str:
        ...

    def verify(self, registration_id: str, code: str) -> bool:
        ...


@runtime_checkable
class IdIssuer(Protocol):
    """Issues the Udyam number for a completed registration."""

    def issue(self) -> str:
        ...


class DemoOtpVerifier:
    """Random 6 digit codes, any 6 digit code verifies."""

    def issue(self, registration_id: str) -> str:
        return str(100000 + secrets.randbelow(900000))

    def verify(self, registration_id: str, code: str) -> bool:
        return bool(OTP_PATTERN.match(code or ""))


class DemoUdyamNumberIssuer:
    """
    Timestamp based Udyam numbers: UDYAM-<last 8 ms digits>-<4 random digits>.

    The random suffix keeps two completions in the same millisecond apart;
    the unique constraint on the column is the final guard.
    """

    def __init__(self, prefix: str = "UDYAM"):
        self.prefix = prefix

    def issue(self) -> str:
        millis = str(int(time.time() * 1000))[-8:]
        suffix = f"{secrets.randbelow(10000):04d}"
        return f"{self.prefix}-{millis}-{suffix}"
