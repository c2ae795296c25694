"""
Share Conservation Conformance Tests

INVARIANT: For every bank, total_share equals the sum of position shares.

    ∀ bank B:
        B.total_share == Σ_p p.debt_shares[B]

INVARIANT: A position's mask bit is set exactly for banks it owes.

    ∀ position p, bank B:
        bit(p.debt_mask, B.index) ⟺ p.debt_shares[B] != 0

Both must hold after any sequence of operations, including failed ones.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from debtledger import (
    DebtLedger,
    DebtLedgerError,
    REPAY_ALL,
    SimulatedMarket,
)

from tests.conftest import assert_invariants, share_sums


SYMBOLS = ["USDC", "DAI", "WETH"]
NUM_POSITIONS = 3


operation = st.one_of(
    st.tuples(
        st.just("borrow"),
        st.integers(min_value=1, max_value=NUM_POSITIONS),
        st.sampled_from(SYMBOLS),
        st.integers(min_value=1, max_value=10**6),
    ),
    st.tuples(
        st.just("repay"),
        st.integers(min_value=1, max_value=NUM_POSITIONS),
        st.sampled_from(SYMBOLS),
        st.one_of(st.just(REPAY_ALL), st.integers(min_value=0, max_value=10**6)),
    ),
    st.tuples(
        st.just("liquidate"),
        st.integers(min_value=1, max_value=NUM_POSITIONS),
        st.sampled_from(SYMBOLS),
        st.one_of(st.just(REPAY_ALL), st.integers(min_value=0, max_value=10**6)),
    ),
    st.tuples(
        st.just("interest"),
        st.just(0),
        st.sampled_from(SYMBOLS),
        st.integers(min_value=0, max_value=2000),
    ),
)


def build_ledger():
    markets = {symbol: SimulatedMarket(symbol) for symbol in SYMBOLS}
    ledger = DebtLedger("conformance")
    for market in markets.values():
        ledger.register(market)
    for i in range(NUM_POSITIONS):
        ledger.open_position(f"user{i}")
    return ledger, markets


def apply(ledger, markets, op):
    """Apply one generated operation; ledger errors are part of the sequence."""
    kind, pid, symbol, value = op
    try:
        if kind == "borrow":
            ledger.borrow(pid, symbol, value)
        elif kind == "repay":
            ledger.repay(pid, symbol, value)
        elif kind == "liquidate":
            ledger.liquidation_repay(pid, symbol, value, liquidator="keeper")
        else:
            markets[symbol].accrue_rate(value)
    except DebtLedgerError:
        pass


class TestShareConservationProperties:
    """Property-based conservation tests."""

    @given(st.lists(operation, max_size=40))
    @settings(max_examples=200, deadline=None)
    def test_conservation_holds_after_any_sequence(self, ops):
        """
        PROPERTY: Share conservation and mask consistency hold after every step.
        """
        ledger, markets = build_ledger()
        for op in ops:
            apply(ledger, markets, op)
            assert_invariants(ledger)

    @given(st.lists(operation, max_size=40))
    @settings(max_examples=100, deadline=None)
    def test_independent_share_sum(self, ops):
        """
        PROPERTY: Summing shares directly agrees with each bank's total_share.
        """
        ledger, markets = build_ledger()
        for op in ops:
            apply(ledger, markets, op)

        sums = share_sums(ledger)
        for symbol in SYMBOLS:
            assert ledger.get_bank(symbol).total_share == sums[symbol]

    @given(st.lists(operation, max_size=30))
    @settings(max_examples=100, deadline=None)
    def test_full_unwind_empties_every_bank(self, ops):
        """
        PROPERTY: Repaying every position in full returns every bank to zero.
        """
        ledger, markets = build_ledger()
        for op in ops:
            apply(ledger, markets, op)

        for pid in range(1, NUM_POSITIONS + 1):
            for symbol in SYMBOLS:
                ledger.repay(pid, symbol, REPAY_ALL)

        for symbol in SYMBOLS:
            bank = ledger.get_bank(symbol)
            assert bank.total_share == 0
            assert bank.total_debt == 0
            assert markets[symbol].current_debt() == 0
        for pid in range(1, NUM_POSITIONS + 1):
            assert ledger.get_position(pid).debt_mask == 0


class TestShareConservationExamples:
    """Explicit conservation examples."""

    def test_audit_detects_tampered_share(self, usdc_ledger):
        usdc_ledger.borrow(1, "USDC", 100)
        usdc_ledger.positions[1].debt_shares["USDC"] = 99

        result = usdc_ledger.verify_share_conservation()

        assert not result['valid']
        assert result['discrepancies'][0]['check'] == 'shares'

    def test_audit_detects_stale_mask(self, usdc_ledger):
        usdc_ledger.borrow(1, "USDC", 100)
        usdc_ledger.positions[1].debt_mask = 0

        result = usdc_ledger.verify_share_conservation()

        assert not result['valid']
        assert result['discrepancies'][0]['check'] == 'mask'

    def test_audit_detects_unregistered_bit(self, usdc_ledger):
        usdc_ledger.positions[1].debt_mask = 1 << 7

        result = usdc_ledger.verify_share_conservation()

        assert not result['valid']
        assert result['discrepancies'][0]['unregistered_bits'] == [7]
