import csv
import logging
from typing import Dict, Iterable, Iterator, Optional, TextIO

from amount import Amount, AmountError
from models import ClientAccount, ProcessingStats, Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1

SKIP = "skip"
ABORT = "abort"
MALFORMED_RECORD_POLICIES = (SKIP, ABORT)

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]


class RecordParseError(ValueError):
    """A single input record could not be turned into a Transaction."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def _parse_id(name: str, value: Optional[str], upper_bound: int) -> int:
    if not value:
        raise RecordParseError(f"missing {name}")
    if not (value.isascii() and value.isdigit()):
        raise RecordParseError(f"invalid {name} {value!r}")
    if len(value.lstrip("0")) > len(str(upper_bound)):
        raise RecordParseError(f"{name} with {len(value)} digits out of range")
    parsed = int(value)
    if parsed > upper_bound:
        raise RecordParseError(f"{name} {parsed} out of range")
    return parsed


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """
    Parse a csv.DictReader row into a Transaction.

    Raises RecordParseError on any malformed field, including amount errors.
    """
    if None in row:
        raise RecordParseError(f"too many fields in row {row[None]!r}")

    normalized = {k.strip().lower(): (v.strip() if v is not None else None) for k, v in row.items()}

    type_str = (normalized.get("type") or "").lower()
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        raise RecordParseError(f"unknown transaction type {type_str!r}") from None

    client_id = _parse_id("client", normalized.get("client"), MAX_CLIENT_ID)
    transaction_id = _parse_id("tx", normalized.get("tx"), MAX_TRANSACTION_ID)

    amount_str = normalized.get("amount")
    amount = None
    if transaction_type.carries_amount:
        if not amount_str:
            raise RecordParseError(f"{transaction_type.value} must specify an amount")
        try:
            amount = Amount.parse(amount_str)
        except AmountError as e:
            raise RecordParseError(str(e)) from e
    elif amount_str:
        raise RecordParseError(f"{transaction_type.value} cannot specify an amount")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


class TransactionReader:
    """
    Iterates the transactions of a CSV stream in file order.

    Malformed records are either logged and skipped or raised, depending on
    the policy. Errors opening or reading the stream always propagate.
    """

    def __init__(self, stream: TextIO, on_malformed: str = SKIP, stats: Optional[ProcessingStats] = None):
        if on_malformed not in MALFORMED_RECORD_POLICIES:
            raise ValueError(f"unknown malformed record policy {on_malformed!r}")
        self._stream = stream
        self._on_malformed = on_malformed
        self._stats = stats

    def __iter__(self) -> Iterator[Transaction]:
        reader = csv.DictReader(self._stream, skipinitialspace=True)
        for row in reader:
            if not any(v and v.strip() for k, v in row.items() if k is not None):
                continue
            try:
                yield parse_row(row)
            except RecordParseError as e:
                error = RecordParseError(str(e), reader.line_num)
                if self._on_malformed == ABORT:
                    raise error from e
                logger.warning(f"Skipping malformed record: {error}")
                if self._stats is not None:
                    self._stats.record_skipped()


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    """Write account snapshots as CSV, one row per client."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow([
            account.client_id,
            account.available.format(),
            account.held.format(),
            account.total.format(),
            str(account.locked).lower(),
        ])
