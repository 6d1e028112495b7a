import threading
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from amount import to_decimal


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class TransactionStatus(Enum):
    PROCESSED = "processed"
    UNDER_DISPUTE = "under_dispute"
    CHARGED_BACK = "charged_back"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """
    A deposit or withdrawal accepted into a client's history.
    Withdrawals are stored with a negative amount.
    """

    amount: int
    status: TransactionStatus = TransactionStatus.PROCESSED


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass
class ClientLedger:
    """
    All transactions accepted for one client, keyed by transaction id.
    Balances are derived from the records on every call, never cached.
    """

    client_id: int
    transactions: Dict[int, TransactionRecord] = field(default_factory=dict)

    def _sum(self, status: TransactionStatus) -> int:
        return sum(record.amount for record in self.transactions.values() if record.status == status)

    @property
    def available(self) -> int:
        return self._sum(TransactionStatus.PROCESSED)

    @property
    def held(self) -> int:
        return self._sum(TransactionStatus.UNDER_DISPUTE)

    @property
    def total(self) -> int:
        return self.available + self.held

    @property
    def locked(self) -> bool:
        return any(record.status == TransactionStatus.CHARGED_BACK for record in self.transactions.values())

    def snapshot(self) -> AccountSnapshot:
        available = self.available
        held = self.held
        return AccountSnapshot(
            client_id=self.client_id,
            available=to_decimal(available),
            held=to_decimal(held),
            total=to_decimal(available + held),
            locked=self.locked,
        )


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.failed = 0
        self.failures_by_kind: Counter = Counter()

    def record_success(self):
        with self._lock:
            self.processed += 1

    def record_failure(self, kind: str):
        with self._lock:
            self.failed += 1
            self.failures_by_kind[kind] += 1
