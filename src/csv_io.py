import csv
import io
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from amount import MAX_AMOUNT, format_amount
from errors import InputFormatError
from models import AccountSnapshot, Transaction, TransactionType

logger = logging.getLogger(__name__)

HEADER = ["client", "available", "held", "total", "locked"]
REQUIRED_COLUMNS = ("type", "client", "tx")
MAX_ID = 2**64 - 1


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """
    Stream transactions from a CSV file, in file order.
    Raises InputFormatError on the first record that cannot be parsed.
    """
    try:
        with open(filepath, "r", newline="") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None:
                logger.info(f"Input {filepath} is empty")
                return

            columns = {name.strip() for name in reader.fieldnames if name}
            missing = [name for name in REQUIRED_COLUMNS if name not in columns]
            if missing:
                raise InputFormatError(f"missing columns {missing} in header {reader.fieldnames}", line_number=1)

            for row in reader:
                yield parse_csv_row(row, line_number=reader.line_num)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise InputFormatError(f"cannot read {filepath}: {e}") from e


def parse_csv_row(row: Dict[Optional[str], Optional[str]], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    # Short rows leave trailing columns as None; extra values are keyed by None
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    transaction_type_str = normalized["type"].lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise InputFormatError(f"unknown transaction type {normalized['type']!r}", line_number) from None

    client_id = _parse_id(normalized["client"], "client", line_number)
    transaction_id = _parse_id(normalized["tx"], "tx", line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise InputFormatError(f"invalid amount {amount_str!r}", line_number) from None
        if not amount.is_finite():
            raise InputFormatError(f"invalid amount {amount_str!r}", line_number)
        if amount.copy_abs() > MAX_AMOUNT:
            raise InputFormatError(f"amount {amount_str!r} out of range", line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, column: str, line_number: Optional[int]) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise InputFormatError(f"invalid {column} id {value!r}", line_number) from None
    if not 0 <= parsed <= MAX_ID:
        raise InputFormatError(f"{column} id {parsed} out of range", line_number)
    return parsed


def write_summary(snapshots: Iterable[AccountSnapshot]) -> str:
    """
    Render account snapshots as CSV.
    With no snapshots only the header is returned, without a trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    rows = 0
    for snapshot in snapshots:
        writer.writerow([
            snapshot.client_id,
            format_amount(snapshot.available),
            format_amount(snapshot.held),
            format_amount(snapshot.total),
            str(snapshot.locked).lower(),
        ])
        rows += 1

    output = buffer.getvalue()
    if rows == 0:
        return output.rstrip("\n")
    return output
