"""Domain models - pure Python dataclasses and enums representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    DEPOSIT = "deposit"


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class LoanStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REPAID = "repaid"
    DEFAULTED = "defaulted"


class RepaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Stage:
    """Single checkpoint in a withdrawal's completion sequence"""

    name: str
    completed: bool = False


@dataclass
class StageTransition:
    """Outcome of advancing a withdrawal by one stage"""

    completed_stage: str
    next_stage: Optional[str]

    @property
    def withdrawal_completed(self) -> bool:
        return self.next_stage is None


@dataclass
class LedgerEntry:
    """Transaction as seen by ledger queries (recent, statement)"""

    transaction_id: str
    date: datetime
    type: str
    amount: Decimal
    currency: str
    description: str
