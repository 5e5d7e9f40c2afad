"""Loan ledger rules"""

from decimal import Decimal
from ccb_gateway.domain.models import LoanStatus
from ccb_gateway.domain.exceptions import InvalidAmountError, ValidationError


def validate_loan_terms(principal: Decimal, interest_rate: Decimal, term_length: int) -> None:
    if principal <= 0:
        raise InvalidAmountError("loan_amount")
    if interest_rate <= 0:
        raise ValidationError("interest_rate", "Interest rate must be positive")
    if term_length <= 0:
        raise ValidationError("term_length", "Term length must be positive")


def validate_repayment(amount: Decimal) -> None:
    if amount <= 0:
        raise InvalidAmountError("repayment_amount")


def status_after_repayment(current: LoanStatus) -> LoanStatus:
    """
    Loan status once a repayment is recorded.

    Any repayment attempt marks the loan active. The status is not derived
    from repayment totals, so a loan is never moved to repaid here.
    """
    return LoanStatus.ACTIVE
