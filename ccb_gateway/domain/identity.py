"""Identity helpers - account numbers, one-time passwords and reset tokens"""

import random
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional
from ccb_gateway.domain.exceptions import InvalidCredentialError

ACCOUNT_NUMBER_MIN = 1_000_000_000
ACCOUNT_NUMBER_MAX = 9_999_999_999
OTP_LENGTH = 6


def generate_account_number(
    exists: Callable[[str], bool],
    rng: random.Random | None = None,
) -> str:
    """
    Draw random 10-digit account numbers until one is unused.

    Args:
        exists: Returns True when any account already holds the number
        rng: Random source (injectable for tests)

    The retry loop is unbounded; with 9e9 candidates collisions are rare.
    """
    rng = rng or random.SystemRandom()
    while True:
        candidate = str(rng.randint(ACCOUNT_NUMBER_MIN, ACCOUNT_NUMBER_MAX))
        if not exists(candidate):
            return candidate


def generate_otp() -> str:
    """Numeric one-time password, e.g. '042917'"""
    return "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def expires_at(now: datetime, minutes: int) -> datetime:
    return now + timedelta(minutes=minutes)


def verify_otp(
    stored_otp: Optional[str],
    stored_expires: Optional[datetime],
    supplied_otp: str,
    now: datetime,
) -> None:
    """
    Check a supplied OTP: exact string match first, then expiry.

    Raises:
        InvalidCredentialError: mismatch, nothing issued, or expired
    """
    if not stored_otp or stored_otp != supplied_otp:
        raise InvalidCredentialError("Invalid OTP")
    if stored_expires is None or stored_expires < now:
        raise InvalidCredentialError("OTP has expired")
