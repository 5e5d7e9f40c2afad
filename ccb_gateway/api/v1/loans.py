"""Loan and repayment endpoints"""

import uuid
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ccb_gateway.api.v1.schemas import (
    LoanCreateRequest,
    LoanListResponse,
    LoanResponse,
    LoanSchema,
    RepaymentListResponse,
    RepaymentRequest,
    RepaymentResponse,
    RepaymentSchema,
)
from ccb_gateway.api.dependencies import get_request_id
from ccb_gateway.domain.exceptions import LoanNotFoundError, UserNotFoundError
from ccb_gateway.domain.loans import status_after_repayment, validate_loan_terms, validate_repayment
from ccb_gateway.domain.models import LoanStatus
from ccb_gateway.infrastructure.database.models import Loan
from ccb_gateway.infrastructure.database.repositories import LoanRepository, UserRepository
from ccb_gateway.infrastructure.database.session import get_db, unit_of_work
from ccb_gateway.infrastructure.observability.logging import log_operation

router = APIRouter()


def _loan_schema(loan: Loan) -> LoanSchema:
    return LoanSchema(
        id=loan.id,
        account_id=loan.account_id,
        loan_amount=loan.loan_amount,
        currency=loan.currency,
        interest_rate=loan.interest_rate,
        term_length=loan.term_length,
        status=loan.status,
        start_date=loan.start_date,
        end_date=loan.end_date,
        repayments=[r.id for r in loan.repayments],
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(body: LoanCreateRequest, request: Request, db: Session = Depends(get_db)):
    """Record a loan application in pending status"""
    with unit_of_work(db, "create_loan"):
        validate_loan_terms(body.loan_amount, body.interest_rate, body.term_length)

        user = UserRepository(db).get_by_id(body.user_id)
        if user is None:
            raise UserNotFoundError(str(body.user_id))

        loan = LoanRepository(db).create_loan(
            user,
            loan_amount=body.loan_amount,
            currency=body.currency,
            interest_rate=body.interest_rate,
            term_length=body.term_length,
        )

    log_operation(get_request_id(request), "create_loan", user.id, loan_id=loan.id, amount=body.loan_amount)
    return LoanResponse(message="Loan created successfully", loan=_loan_schema(loan))


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: uuid.UUID, db: Session = Depends(get_db)):
    loan = LoanRepository(db).get_by_id(loan_id)
    if loan is None:
        raise LoanNotFoundError(str(loan_id))
    return LoanResponse(loan=_loan_schema(loan))


@router.post("/loans/{loan_id}/repayments", response_model=RepaymentResponse, status_code=201)
def repay_loan(loan_id: uuid.UUID, body: RepaymentRequest, request: Request, db: Session = Depends(get_db)):
    """
    Record a pending repayment against one of the user's loans.

    The loan is set to active on every repayment regardless of the amount
    already repaid.
    """
    loans = LoanRepository(db)

    with unit_of_work(db, "repay_loan"):
        validate_repayment(body.repayment_amount)

        user = UserRepository(db).get_by_id(body.user_id)
        if user is None:
            raise UserNotFoundError(str(body.user_id))

        loan = loans.get_for_user(user.id, loan_id)
        if loan is None:
            raise LoanNotFoundError(str(loan_id))

        repayment = loans.add_repayment(user, loan, body.repayment_amount, body.currency)
        loan.status = status_after_repayment(LoanStatus(loan.status)).value

    log_operation(
        get_request_id(request),
        "repay_loan",
        user.id,
        loan_id=loan.id,
        amount=body.repayment_amount,
    )
    return RepaymentResponse(message="Repayment successful", repayment=RepaymentSchema.model_validate(repayment))


@router.get("/loans/{loan_id}/repayments", response_model=RepaymentListResponse)
def list_repayments(loan_id: uuid.UUID, db: Session = Depends(get_db)):
    loan = LoanRepository(db).get_by_id(loan_id)
    if loan is None:
        raise LoanNotFoundError(str(loan_id))
    return RepaymentListResponse(repayments=[RepaymentSchema.model_validate(r) for r in loan.repayments])


@router.get("/users/{user_id}/loans", response_model=LoanListResponse)
def list_user_loans(user_id: uuid.UUID, db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))
    return LoanListResponse(loans=[_loan_schema(loan) for loan in user.loans])
