"""Account ledger rules - balance checks and transaction queries"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Iterable, List
from ccb_gateway.domain.models import LedgerEntry
from ccb_gateway.domain.exceptions import (
    InsufficientFundsError,
    InvalidAmountError,
    InvalidTransactionIdError,
    ValidationError,
)

RECENT_TRANSACTIONS_LIMIT = 10


def ensure_positive(amount: Decimal, field: str = "amount") -> None:
    if amount <= 0:
        raise InvalidAmountError(field)


def debit(balance: Decimal, amount: Decimal, account_number: str) -> Decimal:
    """
    Return the balance after a withdrawal debit.

    Only withdrawals are checked against the balance; adjustments made
    elsewhere may still drive it negative.

    Raises:
        InsufficientFundsError: amount exceeds the current balance
    """
    ensure_positive(amount)
    if balance < amount:
        raise InsufficientFundsError(account_number)
    return balance - amount


def credit(balance: Decimal, amount: Decimal) -> Decimal:
    ensure_positive(amount)
    return balance + amount


def parse_transaction_id(value: str) -> uuid.UUID:
    """Validate an externally supplied transaction id"""
    if not value:
        raise InvalidTransactionIdError()
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise InvalidTransactionIdError() from e


def most_recent(entries: Iterable[LedgerEntry], limit: int = RECENT_TRANSACTIONS_LIMIT) -> List[LedgerEntry]:
    """Newest-first snapshot of the top `limit` entries (no cursor)"""
    if limit < 1:
        raise ValidationError("limit", "Limit must be at least 1")
    return sorted(entries, key=lambda e: e.date, reverse=True)[:limit]


def entries_between(entries: Iterable[LedgerEntry], start_date: date, end_date: date) -> List[LedgerEntry]:
    """Entries whose calendar date falls in [start_date, end_date], in ledger order"""
    if end_date < start_date:
        raise ValidationError("end_date", "End date must not be before start date")
    return [e for e in entries if start_date <= e.date.date() <= end_date]


def total_balance(balances: Iterable[Decimal]) -> Decimal:
    return sum(balances, Decimal("0"))
