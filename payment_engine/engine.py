"""
Payment Engine Module

Applies transaction records to client accounts strictly in input order.
Accounts are created on first reference to a client id. A rejected record
leaves every account untouched and never stops processing of later records.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .accounts import ClientAccount, LedgerError, LockPolicy
from .transactions import (
    Transaction, Deposit, Withdraw, Dispute, Resolve, Chargeback
)
from .logging_config import get_logger, log_action


@dataclass
class ProcessingReport:
    """Outcome of processing a batch of records"""
    applied: int = 0
    rejected: List[Tuple[Transaction, LedgerError]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.applied + len(self.rejected)


class PaymentEngine:
    """
    Holds every client account and dispatches records to them

    Client ids key a dict, so sparse or out-of-range ids are stored as given.
    """

    def __init__(self, lock_policy: LockPolicy = LockPolicy.REJECT_ALL):
        self.lock_policy = lock_policy
        self._accounts: Dict[int, ClientAccount] = {}
        self.logger = get_logger("payment_engine.engine")

    def get_account(self, client: int) -> Optional[ClientAccount]:
        """Get the account for a client, if one has been referenced"""
        return self._accounts.get(client)

    def accounts(self) -> Dict[int, ClientAccount]:
        """
        Accounts with at least one deposit or withdrawal, ordered by client id

        Clients referenced only by disputes, resolves or chargebacks are left out.
        """
        return {
            client: account
            for client, account in sorted(self._accounts.items())
            if account.exists
        }

    def handle_transaction(self, record: Transaction) -> None:
        """
        Apply a single record to its client's account

        Args:
            record: Deposit, Withdraw, Dispute, Resolve or Chargeback

        Raises:
            LedgerError: If the account rejects the operation
            TypeError: If record is not a transaction record
        """
        account = self._account_for(record.client)

        if isinstance(record, Deposit):
            account.deposit(record.tx, record.amount)
        elif isinstance(record, Withdraw):
            account.withdraw(record.tx, record.amount)
        elif isinstance(record, Dispute):
            account.dispute(record.tx)
        elif isinstance(record, Resolve):
            account.resolve(record.tx)
        elif isinstance(record, Chargeback):
            account.chargeback(record.tx)
        else:
            raise TypeError(f"Unsupported transaction record: {record!r}")

        log_action(
            self.logger, "debug", f"Transaction applied: {record.transaction_type.value}",
            action=record.transaction_type.value, resource=f"client:{record.client}",
            extra={
                "tx": record.tx,
                "available": str(account.available),
                "held": str(account.held),
                "locked": account.locked
            }
        )

    def process(self, records: Iterable[Transaction]) -> ProcessingReport:
        """
        Apply records in order, collecting rejections instead of stopping

        Args:
            records: Ordered transaction records

        Returns:
            ProcessingReport with the applied count and rejected records
        """
        report = ProcessingReport()

        for record in records:
            try:
                self.handle_transaction(record)
            except LedgerError as e:
                report.rejected.append((record, e))
                log_action(
                    self.logger, "warning", f"Transaction rejected: {e}",
                    action=record.transaction_type.value, resource=f"client:{record.client}",
                    extra={"tx": record.tx, "error": type(e).__name__}
                )
            else:
                report.applied += 1

        log_action(
            self.logger, "info", "Processing complete",
            action="process",
            extra={"applied": report.applied, "rejected": len(report.rejected)}
        )
        return report

    def _account_for(self, client: int) -> ClientAccount:
        account = self._accounts.get(client)
        if account is None:
            account = ClientAccount(client=client, lock_policy=self.lock_policy)
            self._accounts[client] = account
        return account
