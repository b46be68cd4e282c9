"""
Transaction Records Module

Immutable, typed transaction records consumed by the payment engine.
Deposits and withdrawals move money; disputes, resolves and chargebacks
reference an earlier deposit or withdrawal by its transaction id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .currency import Currency

# Identifier ranges of the reference input format
CLIENT_ID_MAX = 2 ** 16 - 1
TX_ID_MAX = 2 ** 32 - 1


class TransactionType(Enum):
    """Types of transaction records, valued by their CSV name"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


@dataclass(frozen=True)
class Deposit:
    """Credit ``amount`` to the client's available funds"""
    client: int
    tx: int
    amount: Currency

    transaction_type = TransactionType.DEPOSIT


@dataclass(frozen=True)
class Withdraw:
    """Debit ``amount`` from the client's available funds"""
    client: int
    tx: int
    amount: Currency

    transaction_type = TransactionType.WITHDRAWAL


@dataclass(frozen=True)
class Dispute:
    """Claim against an earlier deposit or withdrawal"""
    client: int
    tx: int

    transaction_type = TransactionType.DISPUTE


@dataclass(frozen=True)
class Resolve:
    """Settle an open dispute in the client's favor"""
    client: int
    tx: int

    transaction_type = TransactionType.RESOLVE


@dataclass(frozen=True)
class Chargeback:
    """Settle an open dispute against the client and lock the account"""
    client: int
    tx: int

    transaction_type = TransactionType.CHARGEBACK


Transaction = Union[Deposit, Withdraw, Dispute, Resolve, Chargeback]
