"""
conftest.py - Shared pytest fixtures for debtledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Ledgers (empty, single-bank, multi-bank)
- Simulated and scriptable markets
- Invariant helpers (share conservation, mask consistency)
"""

import pytest
from decimal import Decimal
from typing import Dict, List

from debtledger import (
    DebtLedger,
    SimulatedMarket,
    StaticOracle,
)

from tests.fake_market import FakeMarket


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def assert_invariants(ledger: DebtLedger) -> None:
    """Assert share conservation and mask consistency for every bank and position."""
    result = ledger.verify_share_conservation()
    assert result['valid'], f"Invariant violated: {result['discrepancies']}"


def share_sums(ledger: DebtLedger) -> Dict[str, int]:
    """Sum of position shares per bank, computed independently of the ledger's audit."""
    sums = {bank_id: 0 for bank_id in ledger.list_banks()}
    for position in ledger.positions.values():
        for bank_id, share in position.debt_shares.items():
            sums[bank_id] += share
    return sums


def make_markets(symbols: List[str]) -> Dict[str, SimulatedMarket]:
    return {symbol: SimulatedMarket(symbol) for symbol in symbols}


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def empty_ledger():
    """Fresh ledger with no banks and no positions."""
    return DebtLedger("test")


@pytest.fixture
def usdc_market():
    return SimulatedMarket("USDC")


@pytest.fixture
def usdc_ledger(usdc_market):
    """Ledger with a single USDC bank and one open position for alice."""
    ledger = DebtLedger("test")
    ledger.register(usdc_market)
    ledger.open_position("alice")
    return ledger


@pytest.fixture
def multi_markets():
    return make_markets(["USDC", "DAI", "WETH"])


@pytest.fixture
def multi_bank_ledger(multi_markets):
    """Ledger with USDC, DAI and WETH banks (indices 0, 1, 2) and positions 1 and 2."""
    markets = multi_markets
    oracle = StaticOracle(
        {"USDC": Decimal("1"), "DAI": Decimal("1"), "WETH": Decimal("2000")},
    )
    ledger = DebtLedger("multi", oracle=oracle)
    for market in markets.values():
        ledger.register(market)
    ledger.open_position("alice")
    ledger.open_position("bob")
    return ledger


@pytest.fixture
def fake_market():
    return FakeMarket("FAKE")


@pytest.fixture
def fake_ledger(fake_market):
    """Ledger with one scriptable FAKE bank and one open position."""
    ledger = DebtLedger("fake")
    ledger.register(fake_market)
    ledger.open_position("alice")
    return ledger
