"""Exception hierarchy for the payments ledger."""

from typing import Optional


class PaymentsError(Exception):
    """Base exception for all payments ledger errors."""


class ConfigurationError(PaymentsError):
    """Raised when configuration is invalid."""


class AmountOutOfRangeError(PaymentsError):
    """Raised when an amount cannot be represented as a 64-bit fixed-point integer."""


class InputFormatError(PaymentsError):
    """Raised when the transaction log cannot be read or a record cannot be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class TransactionProcessError(PaymentsError):
    """
    Raised when a single transaction is rejected by the ledger.
    The ledger is left exactly as it was before the rejected call.
    """

    message = "Transaction rejected"

    def __init__(self, client_id: int, transaction_id: int):
        super().__init__(f"{self.message} (client={client_id}, tx={transaction_id})")
        self.client_id = client_id
        self.transaction_id = transaction_id

    @property
    def kind(self) -> str:
        return type(self).__name__


class AccountLockedError(TransactionProcessError):
    message = "Account locked"


class MissingAmountValueError(TransactionProcessError):
    message = "Missing required amount value"


class NonPositiveAmountError(TransactionProcessError):
    message = "Non positive amount in transaction"


class TransactionAlreadyProcessedError(TransactionProcessError):
    message = "Transaction already processed"


class NotEnoughFundsAvailableError(TransactionProcessError):
    message = "Not enough funds available"


class TransactionNotFoundError(TransactionProcessError):
    message = "Transaction not found"


class TransactionAlreadyUnderDisputeError(TransactionProcessError):
    message = "Transaction already under dispute"


class TransactionNotUnderDisputeError(TransactionProcessError):
    message = "Transaction not under dispute"


class CannotDisputeWithdrawalError(TransactionProcessError):
    message = "Transaction to be disputed was a withdrawal"
