"""Staged withdrawal endpoints"""

import uuid
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ccb_gateway.api.v1.schemas import WithdrawalRequest, WithdrawalResponse, WithdrawalSchema
from ccb_gateway.api.dependencies import get_request_id
from ccb_gateway.config import settings
from ccb_gateway.domain.exceptions import AccountNotFoundError, WithdrawalNotFoundError
from ccb_gateway.domain.ledger import debit
from ccb_gateway.domain.models import TransactionType
from ccb_gateway.domain.stages import advance_stage, build_stages
from ccb_gateway.infrastructure.database.repositories import (
    AccountRepository,
    UserRepository,
    WithdrawalRepository,
)
from ccb_gateway.infrastructure.database.session import get_db, unit_of_work
from ccb_gateway.infrastructure.observability.logging import log_operation
from ccb_gateway.infrastructure.observability.metrics import (
    record_withdrawal,
    stage_advance_counter,
)

router = APIRouter()


@router.post("/withdrawals", response_model=WithdrawalResponse, status_code=201)
def create_withdrawal(body: WithdrawalRequest, request: Request, db: Session = Depends(get_db)):
    """
    Debit the account and open a staged withdrawal.

    Flow:
    1. Check the balance covers the amount (nothing is written otherwise)
    2. Debit the balance and log a debit transaction
    3. Create the withdrawal with stage1 confirmed and current_stage = stage1

    The debit is not reversed if later stages never complete.
    """
    accounts = AccountRepository(db)
    withdrawals = WithdrawalRepository(db)

    with unit_of_work(db, "withdraw"):
        account = accounts.get_by_number(body.account_number)
        if account is None:
            raise AccountNotFoundError(body.account_number)

        stage_count = settings.withdrawal_stage_count if body.stage_count is None else body.stage_count
        stages = build_stages(stage_count)
        account.balance = debit(account.balance, body.amount, account.account_number)
        accounts.append_transaction(
            account,
            type=TransactionType.DEBIT.value,
            amount=body.amount,
            currency=body.currency,
            description=body.description,
        )
        withdrawal = withdrawals.create_withdrawal(
            account,
            amount=body.amount,
            currency=body.currency,
            description=body.description,
            stages=stages,
        )
        UserRepository(db).refresh_total_balance(account.user)

    record_withdrawal(body.amount)
    log_operation(
        get_request_id(request),
        "withdraw",
        withdrawal.user_id,
        withdrawal_id=withdrawal.id,
        amount=body.amount,
    )
    return WithdrawalResponse(
        message="Withdrawal initiated successfully",
        withdrawal=WithdrawalSchema.model_validate(withdrawal),
        account_balance=account.balance,
    )


@router.get("/withdrawals/{withdrawal_id}", response_model=WithdrawalResponse)
def get_withdrawal(withdrawal_id: uuid.UUID, db: Session = Depends(get_db)):
    withdrawal = WithdrawalRepository(db).get_by_id(withdrawal_id)
    if withdrawal is None:
        raise WithdrawalNotFoundError(str(withdrawal_id))
    return WithdrawalResponse(
        message="Withdrawal retrieved successfully",
        withdrawal=WithdrawalSchema.model_validate(withdrawal),
    )


@router.put("/withdrawals/{withdrawal_id}/stage", response_model=WithdrawalResponse)
def update_stage(withdrawal_id: uuid.UUID, request: Request, db: Session = Depends(get_db)):
    """
    Complete the current stage and move to the next one.

    Rejected with 409 when the current stage is already complete; the
    withdrawal is marked completed once its last stage completes.
    """
    withdrawals = WithdrawalRepository(db)

    with unit_of_work(db, "advance_stage"):
        withdrawal = withdrawals.get_by_id(withdrawal_id)
        if withdrawal is None:
            raise WithdrawalNotFoundError(str(withdrawal_id))

        transition = advance_stage(withdrawals.stages_of(withdrawal), withdrawal.current_stage)
        withdrawals.apply_transition(withdrawal, transition)

    stage_advance_counter.labels(stage=transition.completed_stage).inc()
    log_operation(
        get_request_id(request),
        "advance_stage",
        withdrawal.user_id,
        withdrawal_id=withdrawal.id,
        stage=transition.completed_stage,
        status=withdrawal.status,
    )
    return WithdrawalResponse(
        message="Stage updated successfully",
        withdrawal=WithdrawalSchema.model_validate(withdrawal),
    )
