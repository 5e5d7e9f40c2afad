"""SQLAlchemy ORM models: one table per entity of the user aggregate"""

import uuid
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

from ccb_gateway.utils.date_utils import utcnow

Base = declarative_base()

Money = Numeric(18, 2, asdecimal=True)


class User(Base):
    """Root of the aggregate; owns every other row through user_id"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(Text, nullable=False)
    middle_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    phone_number = Column(Text, nullable=False)
    gender = Column(Text, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    account_type = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    postal_code = Column(Text, nullable=False)
    state = Column(Text, nullable=False)
    country = Column(Text, nullable=False)
    currency = Column(String(3), nullable=False)
    password_hash = Column(Text, nullable=False)
    pin_hash = Column(Text, nullable=False)
    agree = Column(Boolean, nullable=False, default=True)
    kyc_status = Column(Text, nullable=False, default="pending")
    balance = Column(Money, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    otp = Column(String(6), nullable=True)
    otp_expires = Column(DateTime, nullable=True)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime, nullable=True)

    accounts = relationship(
        "Account", back_populates="user", cascade="all, delete-orphan", order_by="Account.opened_at"
    )
    withdrawals = relationship(
        "Withdrawal", back_populates="user", cascade="all, delete-orphan", order_by="Withdrawal.created_at"
    )
    loans = relationship("Loan", back_populates="user", cascade="all, delete-orphan", order_by="Loan.start_date")
    loan_repayments = relationship(
        "LoanRepayment", back_populates="user", cascade="all, delete-orphan", order_by="LoanRepayment.date"
    )
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan", order_by="Notification.date"
    )


class Account(Base):
    """Bank account with balance and transaction log"""

    __tablename__ = "accounts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_number = Column(String(10), nullable=False, unique=True, index=True)
    type = Column(Text, nullable=False)
    currency = Column(String(3), nullable=False)
    balance = Column(Money, nullable=False, default=0)
    opened_at = Column(DateTime, nullable=False, default=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    user = relationship("User", back_populates="accounts")
    withdrawals = relationship("Withdrawal", back_populates="account", cascade="all, delete-orphan")
    transactions = relationship(
        "AccountTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="AccountTransaction.sequence",
    )


class AccountTransaction(Base):
    """Append-only ledger entry; never updated once written"""

    __tablename__ = "transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)
    type = Column(Text, nullable=False)
    amount = Column(Money, nullable=False)
    currency = Column(String(3), nullable=False)
    description = Column(Text, nullable=False)

    account = relationship("Account", back_populates="transactions")


class Withdrawal(Base):
    """Staged withdrawal; funds are debited when the row is created"""

    __tablename__ = "withdrawals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    account_number = Column(String(10), nullable=False)
    amount = Column(Money, nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(Text, nullable=False, default="pending")
    current_stage = Column(String(16), nullable=False, default="stage1")
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    user = relationship("User", back_populates="withdrawals")
    account = relationship("Account", back_populates="withdrawals")
    stages = relationship(
        "WithdrawalStage",
        back_populates="withdrawal",
        cascade="all, delete-orphan",
        order_by="WithdrawalStage.position",
    )


class WithdrawalStage(Base):
    __tablename__ = "withdrawal_stages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    withdrawal_id = Column(Uuid, ForeignKey("withdrawals.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(16), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)

    withdrawal = relationship("Withdrawal", back_populates="stages")


class Loan(Base):
    __tablename__ = "loans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Uuid, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    loan_amount = Column(Money, nullable=False)
    currency = Column(String(3), nullable=False)
    interest_rate = Column(Numeric(7, 3, asdecimal=True), nullable=False)
    term_length = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    start_date = Column(DateTime, nullable=False, default=utcnow)
    end_date = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="loans")
    repayments = relationship(
        "LoanRepayment", back_populates="loan", cascade="all, delete-orphan", order_by="LoanRepayment.date"
    )


class LoanRepayment(Base):
    __tablename__ = "loan_repayments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    loan_id = Column(Uuid, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Uuid, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    repayment_amount = Column(Money, nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(Text, nullable=False, default="pending")
    date = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="loan_repayments")
    loan = relationship("Loan", back_populates="repayments")


class Notification(Base):
    """In-app message; read flag starts false"""

    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)
    read = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="notifications")
