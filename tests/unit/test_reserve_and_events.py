"""
test_reserve_and_events.py - Unit tests for reserve withdrawal, the event log and logging

Tests:
- withdraw_reserve bounds and InsufficientReserve
- Event sequence numbers and failed operations
- Snapshots (BankInfo, PositionInfo) are frozen
- Log records emitted for committed operations
"""

import dataclasses
import logging

import pytest

from debtledger import (
    EventType,
    InsufficientReserve,
    OverRepayment,
    UnknownBank,
)


def _collect_fees(ledger, market):
    """Borrow 1000 for position 1 and accrue 100 of interest (fee 10)."""
    ledger.borrow(1, "USDC", 1000)
    market.add_interest(100)
    ledger.accrue("USDC")


class TestWithdrawReserve:
    """Tests for DebtLedger.withdraw_reserve."""

    def test_partial_withdrawal(self, usdc_ledger, usdc_market):
        _collect_fees(usdc_ledger, usdc_market)

        assert usdc_ledger.withdraw_reserve("USDC", 4) == 4
        assert usdc_ledger.get_bank("USDC").reserve == 6

    def test_withdraw_everything(self, usdc_ledger, usdc_market):
        _collect_fees(usdc_ledger, usdc_market)
        usdc_ledger.withdraw_reserve("USDC", 10)
        assert usdc_ledger.get_bank("USDC").reserve == 0

    def test_insufficient_reserve(self, usdc_ledger, usdc_market):
        _collect_fees(usdc_ledger, usdc_market)
        with pytest.raises(InsufficientReserve):
            usdc_ledger.withdraw_reserve("USDC", 11)
        assert usdc_ledger.get_bank("USDC").reserve == 10

    def test_does_not_touch_debt_or_shares(self, usdc_ledger, usdc_market):
        _collect_fees(usdc_ledger, usdc_market)
        usdc_ledger.withdraw_reserve("USDC", 10)
        bank = usdc_ledger.get_bank("USDC")
        assert bank.total_debt == 1110
        assert bank.total_share == 1000

    def test_negative_amount(self, usdc_ledger):
        with pytest.raises(ValueError):
            usdc_ledger.withdraw_reserve("USDC", -1)

    def test_unknown_bank(self, usdc_ledger):
        with pytest.raises(UnknownBank):
            usdc_ledger.withdraw_reserve("DAI", 0)

    def test_records_event(self, usdc_ledger, usdc_market):
        _collect_fees(usdc_ledger, usdc_market)
        usdc_ledger.withdraw_reserve("USDC", 3)
        event = usdc_ledger.event_log[-1]
        assert event.event_type == EventType.WITHDRAW_RESERVE
        assert event.amount == 3
        assert event.position_id is None


class TestEventLog:
    """Tests for the append-only event log."""

    def test_sequence_numbers_are_monotonic(self, usdc_ledger, usdc_market):
        _collect_fees(usdc_ledger, usdc_market)
        usdc_ledger.repay(1, "USDC")

        events = usdc_ledger.event_log
        assert [e.sequence_number for e in events] == list(range(len(events)))
        assert [e.event_type for e in events] == [
            EventType.ADD_BANK,
            EventType.BORROW,
            EventType.ACCRUE,
            EventType.REPAY,
        ]

    def test_failed_operation_appends_nothing(self, usdc_ledger):
        usdc_ledger.borrow(1, "USDC", 100)
        before = usdc_ledger.event_log

        with pytest.raises(OverRepayment):
            usdc_ledger.repay(1, "USDC", 101)

        assert usdc_ledger.event_log == before

    def test_log_is_a_copy(self, usdc_ledger):
        events = usdc_ledger.event_log
        usdc_ledger.borrow(1, "USDC", 100)
        assert len(events) == 1
        assert len(usdc_ledger.event_log) == 2

    def test_event_repr(self, usdc_ledger):
        usdc_ledger.borrow(1, "USDC", 100)
        assert repr(usdc_ledger.event_log[-1]) == "DebtEvent(#1 borrow USDC pos=1 amount=100 share=100)"


class TestSnapshots:
    """BankInfo and PositionInfo are immutable copies."""

    def test_bank_info_is_frozen(self, usdc_ledger):
        info = usdc_ledger.get_bank("USDC")
        with pytest.raises(dataclasses.FrozenInstanceError):
            info.total_debt = 5

    def test_position_info_share_of(self, multi_bank_ledger):
        multi_bank_ledger.borrow(1, "DAI", 70)
        info = multi_bank_ledger.get_position(1)
        assert info.share_of("DAI") == 70
        assert info.share_of("USDC") == 0
        assert info.debt_shares == (("DAI", 70),)

    def test_position_info_is_detached(self, usdc_ledger):
        info = usdc_ledger.get_position(1)
        usdc_ledger.borrow(1, "USDC", 10)
        assert info.debt_shares == ()
        assert info.debt_mask == 0


class TestLogging:
    """Log records emitted by the ledger."""

    def test_borrow_logs_at_info(self, usdc_ledger, caplog):
        with caplog.at_level(logging.INFO, logger="debtledger"):
            usdc_ledger.borrow(1, "USDC", 1000)
        assert any("borrowed 1000 USDC" in r.getMessage() for r in caplog.records)

    def test_fee_collection_logs_at_info(self, usdc_ledger, usdc_market, caplog):
        usdc_ledger.borrow(1, "USDC", 1000)
        usdc_market.add_interest(100)
        with caplog.at_level(logging.INFO, logger="debtledger"):
            usdc_ledger.accrue("USDC")
        assert any("fee=10" in r.getMessage() for r in caplog.records)

    def test_external_decrease_logs_warning(self, fake_ledger, fake_market, caplog):
        fake_ledger.borrow(1, "FAKE", 1000)
        fake_market.debt = 900
        with caplog.at_level(logging.WARNING, logger="debtledger"):
            fake_ledger.accrue("FAKE")
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "1000 -> 900" in warnings[0].getMessage()
