from typing import List

from amount import to_internal
from errors import (
    AccountLockedError,
    CannotDisputeWithdrawalError,
    MissingAmountValueError,
    NonPositiveAmountError,
    NotEnoughFundsAvailableError,
    TransactionAlreadyProcessedError,
    TransactionAlreadyUnderDisputeError,
    TransactionNotFoundError,
    TransactionNotUnderDisputeError,
)
from models import (
    AccountSnapshot,
    ClientLedger,
    Transaction,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
)
from state_manager import StateManager


class TransactionProcessor:
    """
    Applies transactions to client ledgers.
    Every guard runs before any mutation, so a rejected transaction
    raises a TransactionProcessError and leaves the ledger untouched.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> None:
        """
        Process a single transaction.

        Raises:
            AccountLockedError: the client has a charged back transaction
            TransactionProcessError: any other guard of the transaction kind failed
        """
        ledger = self._state.get_or_create_ledger(transaction.client_id)

        if ledger.locked:
            raise AccountLockedError(transaction.client_id, transaction.transaction_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(ledger, transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(ledger, transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(ledger, transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(ledger, transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(ledger, transaction)

    def summary(self) -> List[AccountSnapshot]:
        """Snapshots of every known client, ordered by client id."""
        ledgers = self._state.get_all_ledgers()
        return [ledgers[client_id].snapshot() for client_id in sorted(ledgers)]

    def _scaled_amount(self, transaction: Transaction) -> int:
        if transaction.amount is None:
            raise MissingAmountValueError(transaction.client_id, transaction.transaction_id)

        amount = to_internal(transaction.amount)
        if amount <= 0:
            raise NonPositiveAmountError(transaction.client_id, transaction.transaction_id)
        return amount

    def _ensure_new(self, ledger: ClientLedger, transaction: Transaction) -> None:
        if transaction.transaction_id in ledger.transactions:
            raise TransactionAlreadyProcessedError(transaction.client_id, transaction.transaction_id)

    def _find_record(self, ledger: ClientLedger, transaction: Transaction) -> TransactionRecord:
        record = ledger.transactions.get(transaction.transaction_id)
        if record is None:
            raise TransactionNotFoundError(transaction.client_id, transaction.transaction_id)
        return record

    def _handle_deposit(self, ledger: ClientLedger, transaction: Transaction) -> None:
        amount = self._scaled_amount(transaction)
        self._ensure_new(ledger, transaction)

        ledger.transactions[transaction.transaction_id] = TransactionRecord(amount=amount)

    def _handle_withdrawal(self, ledger: ClientLedger, transaction: Transaction) -> None:
        amount = self._scaled_amount(transaction)

        # Funds held by open disputes are not part of available
        if amount > ledger.available:
            raise NotEnoughFundsAvailableError(transaction.client_id, transaction.transaction_id)

        self._ensure_new(ledger, transaction)

        ledger.transactions[transaction.transaction_id] = TransactionRecord(amount=-amount)

    def _handle_dispute(self, ledger: ClientLedger, transaction: Transaction) -> None:
        record = self._find_record(ledger, transaction)

        # A charged back transaction is reported the same way as one under dispute
        if record.status != TransactionStatus.PROCESSED:
            raise TransactionAlreadyUnderDisputeError(transaction.client_id, transaction.transaction_id)

        if record.amount <= 0:
            raise CannotDisputeWithdrawalError(transaction.client_id, transaction.transaction_id)

        record.status = TransactionStatus.UNDER_DISPUTE

    def _handle_resolve(self, ledger: ClientLedger, transaction: Transaction) -> None:
        record = self._find_record(ledger, transaction)

        if record.status != TransactionStatus.UNDER_DISPUTE:
            raise TransactionNotUnderDisputeError(transaction.client_id, transaction.transaction_id)

        record.status = TransactionStatus.PROCESSED

    def _handle_chargeback(self, ledger: ClientLedger, transaction: Transaction) -> None:
        record = self._find_record(ledger, transaction)

        if record.status != TransactionStatus.UNDER_DISPUTE:
            raise TransactionNotUnderDisputeError(transaction.client_id, transaction.transaction_id)

        record.status = TransactionStatus.CHARGED_BACK
