"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ccb_gateway.domain.models import TransactionType


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str


# Users


class RegisterRequest(BaseModel):
    """Request body for POST /v1/users/register"""

    first_name: str = Field(..., min_length=1)
    middle_name: Optional[str] = None
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: str = Field(..., min_length=1)
    gender: str = Field(..., min_length=1)
    date_of_birth: date
    account_type: str = Field(..., min_length=1, description="e.g. savings or current")
    address: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    password: str = Field(..., min_length=6)
    confirm_password: str
    account_pin: str = Field(..., min_length=4)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class AccountSchema(ORMModel):
    id: uuid.UUID
    account_number: str
    type: str
    currency: str
    balance: Decimal


class TransactionSchema(ORMModel):
    id: uuid.UUID
    date: datetime
    type: str
    amount: Decimal
    currency: str
    description: str


class AccountDetailSchema(AccountSchema):
    transactions: List[TransactionSchema]


class UserSchema(ORMModel):
    """User profile without secrets"""

    id: uuid.UUID
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: str
    phone_number: str
    gender: str
    date_of_birth: date
    account_type: str
    address: str
    postal_code: str
    state: str
    country: str
    currency: str
    kyc_status: str
    balance: Decimal
    created_at: datetime
    accounts: List[AccountSchema]


class UserResponse(BaseModel):
    message: str
    user: UserSchema


class UserListResponse(BaseModel):
    message: str
    users: List[UserSchema]


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    account_number: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserSchema


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    new_password: str = Field(..., min_length=6)


# Accounts


class DepositRequest(BaseModel):
    """Request body for POST /v1/accounts/deposit"""

    account_number: str = Field(..., min_length=1)
    account_pin: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)


class DepositResponse(BaseModel):
    message: str
    account: AccountDetailSchema


class BalanceAdjustmentRequest(BaseModel):
    account_number: str = Field(..., min_length=1)
    amount_to_add: Decimal = Field(..., decimal_places=2, description="Signed amount")


class BalanceAdjustmentResponse(BaseModel):
    message: str
    account: AccountSchema
    total_balance: Decimal


class BalanceResponse(BaseModel):
    account_number: str
    balance: Decimal
    currency: str


class TransactionInput(BaseModel):
    """Externally supplied transaction; id is validated by the ledger"""

    transaction_id: str
    date: datetime
    type: TransactionType
    amount: Decimal = Field(..., decimal_places=2)
    currency: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class RecordTransactionRequest(BaseModel):
    user_id: uuid.UUID
    transaction: TransactionInput


class RecordTransactionResponse(BaseModel):
    message: str
    account_id: uuid.UUID
    transactions: List[TransactionSchema]


class LedgerEntrySchema(BaseModel):
    transaction_id: str
    date: datetime
    type: str
    amount: Decimal
    currency: str
    description: str


class RecentTransactionsResponse(BaseModel):
    recent_transactions: List[LedgerEntrySchema]


class StatementRequest(BaseModel):
    user_id: uuid.UUID
    account_number: str = Field(..., min_length=1)
    start_date: date
    end_date: date


class StatementPeriod(BaseModel):
    start_date: date
    end_date: date


class Statement(BaseModel):
    account_number: str
    account_type: str
    balance: Decimal
    currency: str
    transactions: List[LedgerEntrySchema]
    period: StatementPeriod


class StatementResponse(BaseModel):
    message: str
    statement: Statement


# Withdrawals


class WithdrawalRequest(BaseModel):
    """Request body for POST /v1/withdrawals"""

    account_number: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    stage_count: Optional[int] = Field(None, description="Overrides the configured number of stages")


class StageSchema(ORMModel):
    name: str
    completed: bool


class WithdrawalSchema(ORMModel):
    id: uuid.UUID
    account_id: uuid.UUID
    account_number: str
    amount: Decimal
    currency: str
    status: str
    stages: List[StageSchema]
    current_stage: str
    description: Optional[str] = None
    created_at: datetime


class WithdrawalResponse(BaseModel):
    message: str
    withdrawal: WithdrawalSchema
    account_balance: Optional[Decimal] = None


# Loans


class LoanCreateRequest(BaseModel):
    user_id: uuid.UUID
    loan_amount: Decimal = Field(..., decimal_places=2)
    currency: str = Field(..., min_length=1)
    interest_rate: Decimal = Field(..., description="Interest rate in percent")
    term_length: int = Field(..., description="Term in months")


class LoanSchema(BaseModel):
    id: uuid.UUID
    account_id: Optional[uuid.UUID] = None
    loan_amount: Decimal
    currency: str
    interest_rate: Decimal
    term_length: int
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    repayments: List[uuid.UUID]


class LoanResponse(BaseModel):
    message: Optional[str] = None
    loan: LoanSchema


class LoanListResponse(BaseModel):
    loans: List[LoanSchema]


class RepaymentRequest(BaseModel):
    user_id: uuid.UUID
    repayment_amount: Decimal = Field(..., decimal_places=2)
    currency: str = Field(..., min_length=1)


class RepaymentSchema(ORMModel):
    id: uuid.UUID
    loan_id: uuid.UUID
    account_id: Optional[uuid.UUID] = None
    repayment_amount: Decimal
    currency: str
    status: str
    date: datetime


class RepaymentResponse(BaseModel):
    message: str
    repayment: RepaymentSchema


class RepaymentListResponse(BaseModel):
    repayments: List[RepaymentSchema]


# Notifications


class NotificationCreateRequest(BaseModel):
    user_id: uuid.UUID
    message: str = Field(..., min_length=1)


class NotificationSchema(ORMModel):
    id: uuid.UUID
    message: str
    date: datetime
    read: bool


class NotificationResponse(BaseModel):
    message: str
    notification: NotificationSchema


class NotificationListResponse(BaseModel):
    notifications: List[NotificationSchema]


class EmailNotificationRequest(BaseModel):
    email: EmailStr
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
