"""
Client Account Ledger Module

Per-client balances and transaction history with the dispute lifecycle:
a dispute moves the amount of an earlier deposit or withdrawal from
available to held funds, and is settled either by a resolve (funds return
to available) or a chargeback (funds are removed and the account locks).

Accounts expect far more deposits and withdrawals than disputes, so history
is an append-only list and dispute lookups are linear scans returning the
first match in insertion order.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .currency import Currency, CurrencyOverflow


class LedgerError(ValueError):
    """Base class for rejected ledger operations. Nothing is mutated when raised."""

    def __init__(self, message: str, client: Optional[int] = None, tx: Optional[int] = None):
        super().__init__(message)
        self.client = client
        self.tx = tx


class InsufficientFunds(LedgerError):
    """Withdrawal amount is not strictly less than available funds"""


class UnknownTransaction(LedgerError):
    """Referenced transaction is not in the searched history or open disputes"""


class AccountLocked(LedgerError):
    """Operation rejected because a chargeback has locked the account"""


class BalanceOverflow(LedgerError):
    """Resulting balance would leave the 64-bit currency range"""


class LockPolicy(Enum):
    """Which operations a locked account still accepts"""
    REJECT_ALL = "reject_all"
    REJECT_WITHDRAWALS = "reject_withdrawals"
    ALLOW_ALL = "allow_all"


@dataclass(frozen=True)
class ClientTransaction:
    """A transaction id paired with its signed amount"""
    tx: int
    amount: Currency


@dataclass
class ClientAccount:
    """
    Balances and history of a single client.

    ``available + held`` always equals the signed sum of ``history`` minus
    whatever chargebacks removed. ``open_disputes`` holds an entry only
    between a dispute and the resolve or chargeback that settles it.
    """
    client: int
    available: Currency = field(default_factory=Currency.zero)
    held: Currency = field(default_factory=Currency.zero)
    locked: bool = False
    history: List[ClientTransaction] = field(default_factory=list)
    open_disputes: List[ClientTransaction] = field(default_factory=list)
    lock_policy: LockPolicy = LockPolicy.REJECT_ALL

    @property
    def total(self) -> Currency:
        """Available plus held funds"""
        return self.available + self.held

    @property
    def exists(self) -> bool:
        """True once the client has at least one deposit or withdrawal"""
        return bool(self.history)

    def deposit(self, tx: int, amount: Currency) -> None:
        """
        Credit available funds and record the deposit

        The amount is not sign-checked; a negative deposit is recorded as-is.
        """
        self._ensure_unlocked(tx)
        with self._checked_balance(tx):
            available = self.available + amount
        self.history.append(ClientTransaction(tx, amount))
        self.available = available

    def withdraw(self, tx: int, amount: Currency) -> None:
        """
        Debit available funds and record the withdrawal as a negative amount

        Raises:
            InsufficientFunds: If available funds are less than or equal to amount
            AccountLocked: If the lock policy rejects withdrawals
        """
        self._ensure_unlocked(tx, withdrawal=True)
        if self.available <= amount:
            raise InsufficientFunds(
                f"Client {self.client} cannot withdraw {amount} with {self.available} available",
                client=self.client, tx=tx
            )
        with self._checked_balance(tx):
            available = self.available - amount
            debit = -amount
        self.history.append(ClientTransaction(tx, debit))
        self.available = available

    def dispute(self, tx: int) -> None:
        """
        Open a dispute against a deposit or withdrawal in history

        The stored signed amount moves from available to held, so disputing a
        withdrawal (negative amount) raises available and lowers held.

        Raises:
            UnknownTransaction: If tx is not in history
            AccountLocked: If the lock policy rejects the operation
        """
        self._ensure_unlocked(tx)
        entry = self._find(self.history, tx)
        if entry is None:
            raise UnknownTransaction(
                f"Client {self.client} has no transaction {tx} to dispute",
                client=self.client, tx=tx
            )
        with self._checked_balance(tx):
            available = self.available - entry.amount
            held = self.held + entry.amount
        self.open_disputes.append(entry)
        self.available, self.held = available, held

    def resolve(self, tx: int) -> None:
        """
        Settle an open dispute in the client's favor

        Raises:
            UnknownTransaction: If tx has no open dispute
            AccountLocked: If the lock policy rejects the operation
        """
        self._ensure_unlocked(tx)
        index = self._find_open_dispute(tx, "resolve")
        entry = self.open_disputes[index]
        with self._checked_balance(tx):
            available = self.available + entry.amount
            held = self.held - entry.amount
        del self.open_disputes[index]
        self.available, self.held = available, held

    def chargeback(self, tx: int) -> None:
        """
        Settle an open dispute against the client and lock the account

        Raises:
            UnknownTransaction: If tx has no open dispute
            AccountLocked: If the lock policy rejects the operation
        """
        self._ensure_unlocked(tx)
        index = self._find_open_dispute(tx, "charge back")
        entry = self.open_disputes[index]
        with self._checked_balance(tx):
            held = self.held - entry.amount
        del self.open_disputes[index]
        self.held = held
        self.locked = True

    @contextmanager
    def _checked_balance(self, tx: int):
        try:
            yield
        except CurrencyOverflow as e:
            raise BalanceOverflow(
                f"Client {self.client} balance out of range: {e}", client=self.client, tx=tx
            ) from e

    def _ensure_unlocked(self, tx: int, withdrawal: bool = False) -> None:
        if not self.locked or self.lock_policy == LockPolicy.ALLOW_ALL:
            return
        if self.lock_policy == LockPolicy.REJECT_WITHDRAWALS and not withdrawal:
            return
        raise AccountLocked(
            f"Client {self.client} is locked", client=self.client, tx=tx
        )

    def _find_open_dispute(self, tx: int, action: str) -> int:
        for index, entry in enumerate(self.open_disputes):
            if entry.tx == tx:
                return index
        raise UnknownTransaction(
            f"Client {self.client} has no open dispute on transaction {tx} to {action}",
            client=self.client, tx=tx
        )

    @staticmethod
    def _find(entries: List[ClientTransaction], tx: int) -> Optional[ClientTransaction]:
        for entry in entries:
            if entry.tx == tx:
                return entry
        return None
