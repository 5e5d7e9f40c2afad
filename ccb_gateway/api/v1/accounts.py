"""Account ledger endpoints: deposits, balances, transactions and statements"""

import uuid
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ccb_gateway.api.v1.schemas import (
    AccountDetailSchema,
    AccountSchema,
    BalanceAdjustmentRequest,
    BalanceAdjustmentResponse,
    BalanceResponse,
    DepositRequest,
    DepositResponse,
    LedgerEntrySchema,
    RecentTransactionsResponse,
    RecordTransactionRequest,
    RecordTransactionResponse,
    Statement,
    StatementPeriod,
    StatementRequest,
    StatementResponse,
    TransactionSchema,
)
from ccb_gateway.api.dependencies import get_request_id
from ccb_gateway.domain.exceptions import (
    AccountNotFoundError,
    InvalidPinError,
    InvalidTransactionIdError,
    UserNotFoundError,
)
from ccb_gateway.domain.ledger import (
    RECENT_TRANSACTIONS_LIMIT,
    credit,
    entries_between,
    most_recent,
    parse_transaction_id,
)
from ccb_gateway.domain.models import LedgerEntry, TransactionType
from ccb_gateway.infrastructure.database.repositories import AccountRepository, UserRepository
from ccb_gateway.infrastructure.database.session import get_db, unit_of_work
from ccb_gateway.infrastructure.observability.logging import log_operation
from ccb_gateway.infrastructure.security import verify_secret
from ccb_gateway.utils.date_utils import to_naive_utc

router = APIRouter()


def _entry_schema(entry: LedgerEntry) -> LedgerEntrySchema:
    return LedgerEntrySchema(
        transaction_id=entry.transaction_id,
        date=entry.date,
        type=entry.type,
        amount=entry.amount,
        currency=entry.currency,
        description=entry.description,
    )


@router.post("/accounts/deposit", response_model=DepositResponse)
def deposit(body: DepositRequest, request: Request, db: Session = Depends(get_db)):
    """Verify the account PIN, credit the balance and log a deposit transaction"""
    accounts = AccountRepository(db)

    with unit_of_work(db, "deposit"):
        account = accounts.get_by_number(body.account_number)
        if account is None:
            raise AccountNotFoundError(body.account_number)

        if not verify_secret(body.account_pin, account.user.pin_hash):
            raise InvalidPinError()

        account.balance = credit(account.balance, body.amount)
        accounts.append_transaction(
            account,
            type=TransactionType.DEPOSIT.value,
            amount=body.amount,
            currency=account.currency,
            description="Deposit",
        )
        UserRepository(db).refresh_total_balance(account.user)

    log_operation(get_request_id(request), "deposit", account.user_id, account_number=account.account_number)
    return DepositResponse(message="Deposit successful", account=AccountDetailSchema.model_validate(account))


@router.post("/accounts/balance-adjustment", response_model=BalanceAdjustmentResponse)
def adjust_balance(body: BalanceAdjustmentRequest, request: Request, db: Session = Depends(get_db)):
    """
    Add a signed amount to an account balance.

    No transaction is recorded and the result is not checked against zero.
    """
    with unit_of_work(db, "adjust_balance"):
        account = AccountRepository(db).get_by_number(body.account_number)
        if account is None:
            raise AccountNotFoundError(body.account_number)

        account.balance = account.balance + body.amount_to_add
        total = UserRepository(db).refresh_total_balance(account.user)

    log_operation(get_request_id(request), "adjust_balance", account.user_id, account_number=account.account_number)
    return BalanceAdjustmentResponse(
        message="Account balance updated successfully",
        account=AccountSchema.model_validate(account),
        total_balance=total,
    )


@router.get("/accounts/{account_number}/balance", response_model=BalanceResponse)
def get_balance(account_number: str, db: Session = Depends(get_db)):
    account = AccountRepository(db).get_by_number(account_number)
    if account is None:
        raise AccountNotFoundError(account_number)
    return BalanceResponse(account_number=account.account_number, balance=account.balance, currency=account.currency)


@router.post("/accounts/{account_id}/transactions", response_model=RecordTransactionResponse)
def record_transaction(
    account_id: uuid.UUID,
    body: RecordTransactionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Append an externally supplied transaction; the balance is left as is"""
    accounts = AccountRepository(db)

    with unit_of_work(db, "record_transaction"):
        user = UserRepository(db).get_by_id(body.user_id)
        if user is None:
            raise UserNotFoundError(str(body.user_id))

        account = accounts.get_for_user(user.id, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))

        transaction_id = parse_transaction_id(body.transaction.transaction_id)
        if accounts.transaction_exists(transaction_id):
            raise InvalidTransactionIdError("Transaction ID already recorded")

        accounts.append_transaction(
            account,
            type=body.transaction.type.value,
            amount=body.transaction.amount,
            currency=body.transaction.currency,
            description=body.transaction.description,
            transaction_id=transaction_id,
            occurred_at=to_naive_utc(body.transaction.date),
        )

    log_operation(get_request_id(request), "record_transaction", user.id, transaction_id=transaction_id)
    return RecordTransactionResponse(
        message="Transaction updated successfully",
        account_id=account.id,
        transactions=[TransactionSchema.model_validate(t) for t in account.transactions],
    )


@router.get("/users/{user_id}/transactions/recent", response_model=RecentTransactionsResponse)
def recent_transactions(
    user_id: uuid.UUID,
    limit: int = Query(RECENT_TRANSACTIONS_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Newest transactions across all of the user's accounts"""
    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))

    entries = most_recent(AccountRepository.ledger_entries(user.accounts), limit)
    return RecentTransactionsResponse(recent_transactions=[_entry_schema(e) for e in entries])


@router.post("/statements", response_model=StatementResponse)
def generate_statement(body: StatementRequest, db: Session = Depends(get_db)):
    """Account summary with the transactions dated within [start_date, end_date]"""
    user = UserRepository(db).get_by_id(body.user_id)
    if user is None:
        raise UserNotFoundError(str(body.user_id))

    account = next((a for a in user.accounts if a.account_number == body.account_number), None)
    if account is None:
        raise AccountNotFoundError(body.account_number)

    entries = entries_between(AccountRepository.ledger_entries([account]), body.start_date, body.end_date)
    statement = Statement(
        account_number=account.account_number,
        account_type=account.type,
        balance=account.balance,
        currency=account.currency,
        transactions=[_entry_schema(e) for e in entries],
        period=StatementPeriod(start_date=body.start_date, end_date=body.end_date),
    )
    return StatementResponse(message="Statement generated successfully", statement=statement)
