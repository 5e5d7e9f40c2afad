"""Unit tests for identity helpers and loan rules"""

import random
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from ccb_gateway.domain.exceptions import InvalidAmountError, InvalidCredentialError, ValidationError
from ccb_gateway.domain.identity import (
    expires_at,
    generate_account_number,
    generate_otp,
    generate_reset_token,
    verify_otp,
)
from ccb_gateway.domain.loans import status_after_repayment, validate_loan_terms, validate_repayment
from ccb_gateway.domain.models import LoanStatus


def test_account_number_is_ten_digits():
    number = generate_account_number(lambda candidate: False)
    assert len(number) == 10
    assert number.isdigit()
    assert number[0] != "0"


def test_account_number_retries_on_collision():
    """Numbers already held by any account are never returned"""
    rng = random.Random(42)
    first_draws = [str(random.Random(42).randint(1_000_000_000, 9_999_999_999))]
    taken = set(first_draws)
    attempts = []

    def exists(candidate: str) -> bool:
        attempts.append(candidate)
        return candidate in taken

    number = generate_account_number(exists, rng=rng)

    assert number not in taken
    assert attempts[0] in taken
    assert len(attempts) == 2


def test_otp_is_six_digits():
    otp = generate_otp()
    assert len(otp) == 6
    assert otp.isdigit()


def test_reset_token_is_hex():
    token = generate_reset_token()
    assert len(token) == 64
    int(token, 16)


def test_verify_otp_within_window():
    issued = datetime(2024, 1, 1, 9, 0)
    verify_otp("123456", expires_at(issued, 5), "123456", issued + timedelta(minutes=4))


def test_verify_otp_after_expiry():
    """OTP issued at T and checked at T+6min is rejected"""
    issued = datetime(2024, 1, 1, 9, 0)
    with pytest.raises(InvalidCredentialError, match="expired"):
        verify_otp("123456", expires_at(issued, 5), "123456", issued + timedelta(minutes=6))


@pytest.mark.parametrize("supplied", ["654321", "12345", " 123456", ""])
def test_verify_otp_requires_exact_match(supplied):
    issued = datetime(2024, 1, 1, 9, 0)
    with pytest.raises(InvalidCredentialError, match="Invalid OTP"):
        verify_otp("123456", expires_at(issued, 5), supplied, issued)


def test_verify_otp_when_none_issued():
    with pytest.raises(InvalidCredentialError):
        verify_otp(None, None, "123456", datetime(2024, 1, 1))


@pytest.mark.parametrize("current", list(LoanStatus))
def test_repayment_always_activates_loan(current):
    assert status_after_repayment(current) is LoanStatus.ACTIVE


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
def test_repayment_amount_must_be_positive(amount):
    with pytest.raises(InvalidAmountError) as exc_info:
        validate_repayment(amount)
    assert exc_info.value.field == "repayment_amount"


def test_loan_terms_validation():
    validate_loan_terms(Decimal("5000"), Decimal("7.5"), 12)

    with pytest.raises(InvalidAmountError):
        validate_loan_terms(Decimal("0"), Decimal("7.5"), 12)
    with pytest.raises(ValidationError) as exc_info:
        validate_loan_terms(Decimal("5000"), Decimal("7.5"), 0)
    assert exc_info.value.field == "term_length"
