"""Data access layer for the user aggregate"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Sequence
from sqlalchemy import select
from sqlalchemy.orm import Session
from ccb_gateway.infrastructure.database.models import (
    Account,
    AccountTransaction,
    Loan,
    LoanRepayment,
    Notification,
    User,
    Withdrawal,
    WithdrawalStage,
)
from ccb_gateway.domain import stages as stage_machine
from ccb_gateway.domain.exceptions import UnexpectedError
from ccb_gateway.domain.ledger import total_balance
from ccb_gateway.domain.models import (
    LedgerEntry,
    LoanStatus,
    RepaymentStatus,
    Stage,
    StageTransition,
    WithdrawalStatus,
)


class UserRepository:
    """Repository for user records and the accounts they open"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).first()

    def get_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        """Fetch the user holding an unexpired password reset token"""
        return self.db.scalars(
            select(User).where(
                User.password_reset_token == token,
                User.password_reset_expires > now,
            )
        ).first()

    def list_all(self) -> List[User]:
        return list(self.db.scalars(select(User).order_by(User.created_at)))

    def create_user(
        self,
        first_name: str,
        middle_name: Optional[str],
        last_name: str,
        email: str,
        phone_number: str,
        gender: str,
        date_of_birth: date,
        account_type: str,
        address: str,
        postal_code: str,
        state: str,
        country: str,
        currency: str,
        password_hash: str,
        pin_hash: str,
        otp: str,
        otp_expires: datetime,
    ) -> User:
        """Persist a new user record awaiting OTP verification"""
        user = User(
            first_name=first_name,
            middle_name=middle_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            gender=gender,
            date_of_birth=date_of_birth,
            account_type=account_type,
            address=address,
            postal_code=postal_code,
            state=state,
            country=country,
            currency=currency,
            password_hash=password_hash,
            pin_hash=pin_hash,
            agree=True,
            kyc_status="pending",
            balance=Decimal("0"),
            otp=otp,
            otp_expires=otp_expires,
        )
        self.db.add(user)
        self.db.flush()  # Get ID without committing
        return user

    def account_number_exists(self, account_number: str) -> bool:
        """Check the number against every account of every user"""
        return self.db.scalars(
            select(Account.id).where(Account.account_number == account_number)
        ).first() is not None

    def open_account(self, user: User, account_number: str, account_type: str, currency: str) -> Account:
        account = Account(
            account_number=account_number,
            type=account_type,
            currency=currency,
            balance=Decimal("0"),
        )
        user.accounts.append(account)
        self.db.flush()
        return account

    def refresh_total_balance(self, user: User) -> Decimal:
        """Recompute the user's total as the sum of account balances"""
        user.balance = total_balance(acc.balance for acc in user.accounts)
        return user.balance

    def delete(self, user: User) -> None:
        """Delete the user; accounts, withdrawals, loans and notifications cascade"""
        self.db.delete(user)


class AccountRepository:
    """Repository for accounts and their transaction logs"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_number(self, account_number: str) -> Optional[Account]:
        return self.db.scalars(select(Account).where(Account.account_number == account_number)).first()

    def get_for_user(self, user_id: uuid.UUID, account_id: uuid.UUID) -> Optional[Account]:
        return self.db.scalars(
            select(Account).where(Account.id == account_id, Account.user_id == user_id)
        ).first()

    def transaction_exists(self, transaction_id: uuid.UUID) -> bool:
        return self.db.get(AccountTransaction, transaction_id) is not None

    def append_transaction(
        self,
        account: Account,
        type: str,
        amount: Decimal,
        currency: str,
        description: str,
        transaction_id: Optional[uuid.UUID] = None,
        occurred_at: Optional[datetime] = None,
    ) -> AccountTransaction:
        """Append a ledger entry; entries are never modified afterwards"""
        txn = AccountTransaction(
            id=transaction_id or uuid.uuid4(),
            sequence=len(account.transactions) + 1,
            type=type,
            amount=amount,
            currency=currency,
            description=description,
        )
        if occurred_at is not None:
            txn.date = occurred_at
        account.transactions.append(txn)
        self.db.flush()
        return txn

    @staticmethod
    def ledger_entries(accounts: Sequence[Account]) -> List[LedgerEntry]:
        """Flatten transactions of the given accounts into domain entries"""
        return [
            LedgerEntry(
                transaction_id=str(txn.id),
                date=txn.date,
                type=txn.type,
                amount=txn.amount,
                currency=txn.currency,
                description=txn.description,
            )
            for account in accounts
            for txn in account.transactions
        ]


class WithdrawalRepository:
    """Repository for staged withdrawals"""

    def __init__(self, db: Session):
        self.db = db

    def create_withdrawal(
        self,
        account: Account,
        amount: Decimal,
        currency: str,
        description: str,
        stages: Sequence[Stage],
    ) -> Withdrawal:
        """Persist a withdrawal; current_stage starts at the first stage"""
        withdrawal = Withdrawal(
            user=account.user,
            account=account,
            account_number=account.account_number,
            amount=amount,
            currency=currency,
            description=description,
            status=WithdrawalStatus.PENDING.value,
            current_stage=stages[0].name,
        )
        for position, stage in enumerate(stages):
            withdrawal.stages.append(
                WithdrawalStage(position=position, name=stage.name, completed=stage.completed)
            )
        self.db.add(withdrawal)
        self.db.flush()
        return withdrawal

    def get_by_id(self, withdrawal_id: uuid.UUID) -> Optional[Withdrawal]:
        return self.db.get(Withdrawal, withdrawal_id)

    @staticmethod
    def stages_of(withdrawal: Withdrawal) -> List[Stage]:
        return [Stage(name=s.name, completed=s.completed) for s in withdrawal.stages]

    def apply_transition(self, withdrawal: Withdrawal, transition: StageTransition) -> Withdrawal:
        """
        Persist a domain transition: copy the updated stage flags onto the
        rows, then move the pointer or finish the withdrawal.

        Raises:
            UnexpectedError: resulting stage list is out of order
        """
        updated = stage_machine.apply_transition(self.stages_of(withdrawal), transition)
        for row, stage in zip(withdrawal.stages, updated):
            row.completed = stage.completed

        if transition.withdrawal_completed:
            withdrawal.status = WithdrawalStatus.COMPLETED.value
        else:
            withdrawal.current_stage = transition.next_stage

        if not stage_machine.is_consistent(updated, withdrawal.current_stage):
            raise UnexpectedError(f"Withdrawal {withdrawal.id} stages out of order at {withdrawal.current_stage}")

        self.db.flush()
        return withdrawal


class LoanRepository:
    """Repository for loans and repayments"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(
        self,
        user: User,
        loan_amount: Decimal,
        currency: str,
        interest_rate: Decimal,
        term_length: int,
    ) -> Loan:
        loan = Loan(
            account_id=user.accounts[0].id if user.accounts else None,
            loan_amount=loan_amount,
            currency=currency,
            interest_rate=interest_rate,
            term_length=term_length,
            status=LoanStatus.PENDING.value,
        )
        user.loans.append(loan)
        self.db.flush()
        return loan

    def get_by_id(self, loan_id: uuid.UUID) -> Optional[Loan]:
        return self.db.get(Loan, loan_id)

    def get_for_user(self, user_id: uuid.UUID, loan_id: uuid.UUID) -> Optional[Loan]:
        return self.db.scalars(select(Loan).where(Loan.id == loan_id, Loan.user_id == user_id)).first()

    def add_repayment(self, user: User, loan: Loan, amount: Decimal, currency: str) -> LoanRepayment:
        repayment = LoanRepayment(
            user=user,
            loan=loan,
            account_id=loan.account_id,
            repayment_amount=amount,
            currency=currency,
            status=RepaymentStatus.PENDING.value,
        )
        self.db.add(repayment)
        self.db.flush()
        return repayment


class NotificationRepository:
    """Repository for the per-user notification log"""

    def __init__(self, db: Session):
        self.db = db

    def append(self, user: User, message: str) -> Notification:
        notification = Notification(message=message, read=False)
        user.notifications.append(notification)
        self.db.flush()
        return notification
