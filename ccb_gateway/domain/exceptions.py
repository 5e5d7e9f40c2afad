"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Requested entity does not exist"""

    entity = "Resource"

    def __init__(self, identifier: str | None = None):
        self.identifier = identifier
        super().__init__(f"{self.entity} not found")


class UserNotFoundError(NotFoundError):
    entity = "User"


class AccountNotFoundError(NotFoundError):
    entity = "Account"


class WithdrawalNotFoundError(NotFoundError):
    entity = "Withdrawal"


class LoanNotFoundError(NotFoundError):
    entity = "Loan"


class ConflictError(DomainException):
    """Request conflicts with the current state of an entity"""

    pass


class StageAlreadyCompletedError(ConflictError):
    """Current withdrawal stage was already completed"""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Current stage {stage} is already completed")


class EmailAlreadyRegisteredError(ConflictError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("User already exists")


class ConcurrentUpdateError(ConflictError):
    """Entity was modified by another request since it was loaded"""

    pass


class ValidationError(DomainException):
    """Input is missing or malformed; carries the offending field"""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class InvalidAmountError(ValidationError):
    def __init__(self, field: str = "amount"):
        super().__init__(field, f"Invalid {field.replace('_', ' ')}")


class InvalidTransactionIdError(ValidationError):
    def __init__(self, message: str = "Invalid transaction ID"):
        super().__init__("transaction_id", message)


class InsufficientFundsError(DomainException):
    """Account balance cannot cover the requested debit"""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__("Insufficient balance")


class InvalidCredentialError(DomainException):
    """Password, PIN, OTP or reset token mismatch or expiry"""

    pass


class InvalidPinError(InvalidCredentialError):
    def __init__(self):
        super().__init__("Invalid account PIN")


class UnexpectedError(DomainException):
    """Storage or collaborator failure; detail is logged, never returned"""

    pass
