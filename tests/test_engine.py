"""
Test suite for engine module

Tests dispatching records to client accounts and collecting rejections.
"""

import io
import json

import pytest

from payment_engine.currency import Currency, MAX_UNITS
from payment_engine.accounts import (
    LockPolicy, InsufficientFunds, UnknownTransaction, AccountLocked, BalanceOverflow
)
from payment_engine.engine import PaymentEngine
from payment_engine.logging_config import setup_logging
from payment_engine.transactions import (
    Deposit, Withdraw, Dispute, Resolve, Chargeback
)


def amount(text: str) -> Currency:
    return Currency.parse(text)


class TestPaymentEngine:
    """Test record dispatch"""

    def setup_method(self):
        self.engine = PaymentEngine()

    def test_accounts_created_on_demand(self):
        assert self.engine.get_account(1) is None
        self.engine.handle_transaction(Deposit(1, 1, amount("1")))
        assert self.engine.get_account(1).available == amount("1")

    def test_clients_are_independent(self):
        self.engine.handle_transaction(Deposit(1, 1, amount("1")))
        self.engine.handle_transaction(Deposit(2, 2, amount("2")))
        self.engine.handle_transaction(Dispute(2, 2))
        assert self.engine.get_account(1).held == Currency.zero()
        assert self.engine.get_account(2).held == amount("2")

    def test_dispute_of_other_clients_transaction_is_unknown(self):
        self.engine.handle_transaction(Deposit(1, 1, amount("1")))
        with pytest.raises(UnknownTransaction):
            self.engine.handle_transaction(Dispute(2, 1))

    def test_handle_transaction_raises_ledger_errors(self):
        with pytest.raises(InsufficientFunds):
            self.engine.handle_transaction(Withdraw(1, 1, amount("1")))

    def test_unsupported_record(self):
        class Transfer:
            client = 1
            tx = 1

        with pytest.raises(TypeError):
            self.engine.handle_transaction(Transfer())

    def test_concrete_scenario(self):
        report = self.engine.process([
            Deposit(1, 1, amount("1.0000")),
            Withdraw(1, 2, amount("0.5000")),
        ])
        assert report.applied == 2
        account = self.engine.get_account(1)
        assert str(account.available) == "0.5000"

        report = self.engine.process([Withdraw(1, 3, amount("0.5000"))])
        assert report.applied == 0
        assert isinstance(report.rejected[0][1], InsufficientFunds)
        assert str(account.available) == "0.5000"

        self.engine.process([Dispute(1, 1)])
        assert str(account.available) == "-0.5000"
        assert str(account.held) == "1.0000"

        self.engine.process([Resolve(1, 1)])
        assert str(account.available) == "0.5000"
        assert str(account.held) == "0.0000"

    def test_process_continues_after_rejection(self):
        records = [
            Deposit(1, 1, amount("1")),
            Resolve(1, 1),
            Withdraw(1, 2, amount("5")),
            Deposit(2, 3, amount("2")),
            Dispute(2, 3),
            Chargeback(2, 3),
            Deposit(2, 4, amount("1")),
        ]
        report = self.engine.process(records)
        assert report.applied == 4
        assert report.total == len(records)
        assert [type(e) for _, e in report.rejected] == [
            UnknownTransaction, InsufficientFunds, AccountLocked
        ]
        assert report.rejected[0][0] == Resolve(1, 1)
        locked = self.engine.get_account(2)
        assert locked.locked
        assert locked.total == Currency.zero()

    def test_lock_policy_applies_to_new_accounts(self):
        engine = PaymentEngine(lock_policy=LockPolicy.ALLOW_ALL)
        report = engine.process([
            Deposit(1, 1, amount("1")),
            Dispute(1, 1),
            Chargeback(1, 1),
            Deposit(1, 2, amount("1")),
        ])
        assert not report.rejected
        assert engine.get_account(1).available == amount("1")

    def test_accounts_only_lists_clients_with_history(self):
        self.engine.process([
            Deposit(5, 1, amount("1")),
            Dispute(3, 9),
            Deposit(2, 2, amount("1")),
        ])
        assert list(self.engine.accounts()) == [2, 5]
        assert self.engine.get_account(3) is not None

    def test_client_ids_are_not_truncated(self):
        self.engine.handle_transaction(Deposit(70000, 1, amount("1")))
        assert list(self.engine.accounts()) == [70000]

    def test_rejections_are_logged(self):
        stream = io.StringIO()
        setup_logging(level="WARNING", stream=stream)
        self.engine.process([Dispute(1, 42)])
        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert entries[0]["level"] == "WARNING"
        assert entries[0]["action"] == "dispute"
        assert entries[0]["resource"] == "client:1"
        assert entries[0]["extra"] == {"tx": 42, "error": "UnknownTransaction"}
        assert entries[0]["module"] == "payment_engine.engine"

    def test_overflowing_record_is_rejected_and_processing_continues(self):
        report = self.engine.process([
            Deposit(1, 1, Currency(MAX_UNITS)),
            Deposit(1, 2, Currency(1)),
            Deposit(2, 3, amount("1")),
        ])
        assert report.applied == 2
        assert len(report.rejected) == 1
        record, error = report.rejected[0]
        assert record == Deposit(1, 2, Currency(1))
        assert isinstance(error, BalanceOverflow)
        assert self.engine.get_account(1).available == Currency(MAX_UNITS)
        assert self.engine.get_account(2).available == amount("1")
