"""
CSV Transaction Reader

Turns rows of ``type, client, tx, amount`` into transaction records.
Malformed rows are rejected here so the engine only ever sees valid records.
"""

import csv
from typing import Iterator, List, Optional, TextIO

from pydantic import BaseModel, Field, ValidationError

from .currency import Currency, InvalidFormat, CurrencyOverflow
from .transactions import (
    CLIENT_ID_MAX, TX_ID_MAX, TransactionType, Transaction,
    Deposit, Withdraw, Dispute, Resolve, Chargeback
)
from .logging_config import get_logger, log_action

HEADER = ["type", "client", "tx", "amount"]

logger = get_logger("payment_engine.csv_reader")


class MalformedRecord(ValueError):
    """Raised when a CSV row cannot be turned into a transaction record"""

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class TransactionRow(BaseModel):
    """Schema of a single CSV row"""
    type: TransactionType
    client: int = Field(..., ge=0, le=CLIENT_ID_MAX)
    tx: int = Field(..., ge=0, le=TX_ID_MAX)
    amount: Optional[str] = None

    def to_transaction(self) -> Transaction:
        if self.type.carries_amount:
            if self.amount is None:
                raise MalformedRecord(f"{self.type.value} requires an amount")
            amount = Currency.parse(self.amount)
            if self.type == TransactionType.DEPOSIT:
                return Deposit(self.client, self.tx, amount)
            return Withdraw(self.client, self.tx, amount)

        if self.type == TransactionType.DISPUTE:
            return Dispute(self.client, self.tx)
        if self.type == TransactionType.RESOLVE:
            return Resolve(self.client, self.tx)
        return Chargeback(self.client, self.tx)


def parse_row(fields: List[str], line: Optional[int] = None) -> Transaction:
    """
    Parse raw CSV fields into a transaction record

    Fields are whitespace-trimmed. The amount column is required for deposits
    and withdrawals and ignored for the other types.

    Args:
        fields: Raw CSV fields in ``type, client, tx, amount`` order
        line: Line number used in error messages

    Returns:
        Transaction record

    Raises:
        MalformedRecord: If the row does not describe a valid transaction
    """
    fields = [f.strip() for f in fields]
    if len(fields) < 3:
        raise MalformedRecord(f"expected at least 3 fields, got {len(fields)}", line)

    amount = fields[3] if len(fields) > 3 and fields[3] else None
    try:
        row = TransactionRow(type=fields[0], client=fields[1], tx=fields[2], amount=amount)
        return row.to_transaction()
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'row'}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedRecord(errors, line) from e
    except (InvalidFormat, CurrencyOverflow) as e:
        raise MalformedRecord(f"amount: {e}", line) from e
    except MalformedRecord as e:
        raise MalformedRecord(str(e), line) from e


def read_transactions(stream: TextIO, skip_invalid: bool = False) -> Iterator[Transaction]:
    """
    Read transaction records from CSV text

    The first non-blank row is treated as the header when it starts with
    ``type``. Blank rows are ignored.

    Args:
        stream: Text stream of CSV data
        skip_invalid: Log and skip malformed rows instead of raising

    Yields:
        Transaction records in input order

    Raises:
        MalformedRecord: On the first malformed row when skip_invalid is False
    """
    reader = csv.reader(stream)
    header_checked = False

    for fields in reader:
        if not fields or all(not f.strip() for f in fields):
            continue

        if not header_checked:
            header_checked = True
            if fields[0].strip().lower() == HEADER[0]:
                continue

        try:
            yield parse_row(fields, line=reader.line_num)
        except MalformedRecord as e:
            if not skip_invalid:
                raise
            log_action(
                logger, "warning", f"Skipping malformed record: {e}",
                action="read", resource=f"line:{e.line}"
            )
