import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from amount import Amount


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    SUCCESS = "success"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_FROZEN = "account_frozen"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    ALREADY_DISPUTED = "already_disputed"
    DISPUTE_NOT_FOUND = "dispute_not_found"
    OVERFLOW = "overflow"

    @property
    def is_success(self) -> bool:
        return self is ProcessingResult.SUCCESS


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Amount] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Amount = field(default_factory=Amount.zero)
    held: Amount = field(default_factory=Amount.zero)
    locked: bool = False

    @property
    def total(self) -> Amount:
        return self.available + self.held


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.failed = 0
        self.skipped = 0

    def record_success(self):
        with self._lock:
            self.processed += 1

    def record_failure(self):
        with self._lock:
            self.failed += 1

    def record_skipped(self):
        with self._lock:
            self.skipped += 1
