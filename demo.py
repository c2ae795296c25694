#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Debt Ledger Step by Step

This is a pedagogical demonstration of share-based debt accounting.
Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation   - Banks, positions, the first borrow
  4-5:  Interest     - Accrual, the protocol fee, sharing interest by shares
  6-7:  Reading Debt - The debt mask, list_debts, valuation with an oracle
  8-9:  Paying Back  - Partial and full repayment, liquidation
  10:   Safety       - Rejections, atomicity, the audit and the event log

Run:
    python demo.py             # Interactive mode (press Enter for each step)
    python demo.py --quick     # Run all steps without pausing
    python demo.py --verbose   # Also show the ledger's log output
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
import sys

from debtledger import (
    DebtLedger,
    DebtLedgerError,
    OverRepayment,
    REPAY_ALL,
    SimulatedMarket,
    StaticOracle,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    fee_rate_bps: int = 1000

    alice_borrow: int = 1000
    bob_borrow: int = 500
    interest: int = 178

    weth_price: Decimal = Decimal("2000")
    weth_borrow: int = 2 * 10**18


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv
VERBOSE = "--verbose" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def show_bank(ledger: DebtLedger, bank_id: str):
    bank = ledger.get_bank(bank_id)
    print(f"  {bank_id:5} index={bank.index} total_debt={bank.total_debt} "
          f"total_share={bank.total_share} reserve={bank.reserve}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_register_banks():
    """Create a ledger and list banks."""
    step_header(1, "Banks",
        "A bank is the ledger's bookkeeping for one external lending market.")

    print("""
    The ledger borrows from external money markets on behalf of its users.
    Each market becomes a BANK with:

    - index:        Stable slot 0..255 (also a bit in every position's mask)
    - total_debt:   What the ledger owes the market (as of the last accrual)
    - total_share:  Sum of all positions' debt shares
    - reserve:      Fees collected by the protocol
    """)

    wait_for_enter()

    oracle = StaticOracle(
        {"USDC": 1, "DAI": 1, "WETH": CONFIG.weth_price},
        decimals={"WETH": 18},
    )
    ledger = DebtLedger("tutorial", fee_rate_bps=CONFIG.fee_rate_bps, oracle=oracle)
    markets = {symbol: SimulatedMarket(symbol) for symbol in ["USDC", "DAI", "WETH"]}

    for market in markets.values():
        print(f">>> ledger.register(SimulatedMarket({market.symbol!r}))")
        ledger.register(market)

    section_header("Banks")
    for bank_id in ledger.list_banks():
        show_bank(ledger, bank_id)

    return ledger, markets


def step_02_open_positions(ledger: DebtLedger):
    """Open positions."""
    step_header(2, "Positions",
        "A position holds debt shares, one entry per bank it owes.")

    alice = ledger.open_position("alice", collateral_ref="LP-USDC-WETH", collateral_amount=5000)
    bob = ledger.open_position("bob", collateral_ref="LP-DAI-USDC", collateral_amount=2000)
    print(f">>> alice = ledger.open_position('alice', ...)   # -> {alice}")
    print(f">>> bob = ledger.open_position('bob', ...)       # -> {bob}")
    print(f"\n  {ledger.get_position(alice)}")

    wait_for_enter()
    return alice, bob


def step_03_first_borrow(ledger: DebtLedger, alice: int):
    """The first borrow in an empty bank mints shares 1:1."""
    step_header(3, "The First Borrow",
        "With no shares outstanding, one unit borrowed mints one share.")

    share = ledger.borrow(alice, "USDC", CONFIG.alice_borrow)
    print(f">>> ledger.borrow(alice, 'USDC', {CONFIG.alice_borrow})   # -> {share} shares")
    show_bank(ledger, "USDC")
    print(f"  alice's mask: {ledger.debt_mask_of(alice)}")

    wait_for_enter()


# ============================================================================
# PHASE 2: INTEREST (Steps 4-5)
# ============================================================================

def step_04_shares_after_first(ledger: DebtLedger, bob: int):
    """A second borrower at the same share price."""
    step_header(4, "A Second Borrower",
        "Shares are priced at total_debt / total_share, rounded up for the borrower.")

    share = ledger.borrow(bob, "USDC", CONFIG.bob_borrow)
    print(f">>> ledger.borrow(bob, 'USDC', {CONFIG.bob_borrow})   # -> {share} shares")
    show_bank(ledger, "USDC")

    wait_for_enter()


def step_05_accrual(ledger: DebtLedger, markets, alice: int, bob: int):
    """Interest accrues in the market and is split by shares."""
    step_header(5, "Accrual and the Protocol Fee",
        "The market's debt grows; the ledger syncs it and borrows a fee on top.")

    markets["USDC"].add_interest(CONFIG.interest)
    print(f">>> markets['USDC'].add_interest({CONFIG.interest})")
    print(f"    market now reports {markets['USDC'].current_debt()}")

    result = ledger.accrue("USDC")
    print(f">>> ledger.accrue('USDC')   # -> {result}")
    show_bank(ledger, "USDC")

    section_header("Interest Is Shared by Shares")
    print(f"  debt_of(alice) = {ledger.debt_of(alice, 'USDC')}")
    print(f"  debt_of(bob)   = {ledger.debt_of(bob, 'USDC')}")
    print("""
    Each debt is rounded UP, so the sum may exceed total_debt by at most
    one unit per position. Rounding never favours the borrower.
    """)

    wait_for_enter()


# ============================================================================
# PHASE 3: READING DEBT (Steps 6-7)
# ============================================================================

def step_06_debt_mask(ledger: DebtLedger, alice: int):
    """The active-debt mask enumerates only banks a position owes."""
    step_header(6, "The Debt Mask",
        "Bit i is set exactly when the position owes the bank with index i.")

    ledger.borrow(alice, "WETH", CONFIG.weth_borrow)
    print(f">>> ledger.borrow(alice, 'WETH', {CONFIG.weth_borrow})")
    print(f"  mask word: {ledger.get_position(alice).debt_mask:#b}")
    print(f"  banks:     {list(ledger.debt_mask_of(alice))}")
    print(f"  debts:     {ledger.list_debts(alice)}")

    wait_for_enter()


def step_07_valuation(ledger: DebtLedger, alice: int):
    """Value a position's debts with the oracle."""
    step_header(7, "Valuation",
        "total_borrow_value sums every debt in the oracle's common unit.")

    print(f"  total_borrow_value(alice) = {ledger.total_borrow_value(alice)} USD")
    ledger.oracle.update_price("WETH", Decimal("2500"))
    print(">>> oracle.update_price('WETH', 2500)")
    print(f"  total_borrow_value(alice) = {ledger.total_borrow_value(alice)} USD")

    wait_for_enter()


# ============================================================================
# PHASE 4: PAYING BACK (Steps 8-9)
# ============================================================================

def step_08_repay(ledger: DebtLedger, alice: int):
    """Partial and full repayment."""
    step_header(8, "Repayment",
        "Partial repayment burns shares rounded down; full repayment burns them all.")

    paid, burned = ledger.repay(alice, "USDC", 100)
    print(f">>> ledger.repay(alice, 'USDC', 100)   # -> paid={paid}, burned={burned}")
    print(f"  alice's USDC shares: {ledger.debt_share_of(alice, 'USDC')}")

    paid, burned = ledger.repay(alice, "USDC", REPAY_ALL)
    print(f">>> ledger.repay(alice, 'USDC', REPAY_ALL)   # -> paid={paid}, burned={burned}")
    print(f"  alice's mask: {ledger.debt_mask_of(alice)}")

    wait_for_enter()


def step_09_liquidation(ledger: DebtLedger, alice: int):
    """A third party repays on alice's behalf."""
    step_header(9, "Liquidation",
        "liquidation_repay has no ownership check; the caller decides eligibility.")

    paid, burned = ledger.liquidation_repay(alice, "WETH", REPAY_ALL, liquidator="keeper")
    print(f">>> ledger.liquidation_repay(alice, 'WETH', REPAY_ALL, liquidator='keeper')")
    print(f"    -> paid={paid}, burned={burned}")
    print(f"  alice's debts: {ledger.list_debts(alice)}")

    wait_for_enter()


# ============================================================================
# PHASE 5: SAFETY (Step 10)
# ============================================================================

def step_10_safety(ledger: DebtLedger, bob: int):
    """Rejections, the audit and the event log."""
    step_header(10, "Safety",
        "Failed operations change nothing; the audit proves share conservation.")

    owed = ledger.debt_of(bob, "USDC")
    try:
        ledger.repay(bob, "USDC", owed + 1)
    except OverRepayment as e:
        print(f"  Rejected: {e}")
    try:
        ledger.borrow(bob, "NOPE", 1)
    except DebtLedgerError as e:
        print(f"  Rejected: {type(e).__name__}: {e}")

    section_header("Audit")
    result = ledger.verify_share_conservation()
    print(f"  valid={result['valid']} discrepancies={result['discrepancies']}")

    section_header("Event Log")
    for event in ledger.event_log:
        print(f"  {event}")


def main():
    if VERBOSE:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    ledger, markets = step_01_register_banks()
    alice, bob = step_02_open_positions(ledger)
    step_03_first_borrow(ledger, alice)
    step_04_shares_after_first(ledger, bob)
    step_05_accrual(ledger, markets, alice, bob)
    step_06_debt_mask(ledger, alice)
    step_07_valuation(ledger, alice)
    step_08_repay(ledger, alice)
    step_09_liquidation(ledger, alice)
    step_10_safety(ledger, bob)

    print(f"\n{'='*70}")
    print("Tutorial complete.")
    print(f"{'='*70}")


if __name__ == "__main__":
    main()
