"""
debt_ledger.py - Share-based debt ledger over a set of lending banks

The DebtLedger is the central state manager of the accounting core. It is
the only class that mutates bank totals and position debt shares.

Key responsibilities:
    - Registers banks (external lending markets) in a bounded BankRegistry
    - Opens positions and tracks each position's debt share per bank
    - Keeps every position's active-debt mask in step with its shares
    - Accrues interest from the external market before every debt read or write
    - Serializes all mutating operations and rejects re-entry

Share accounting:
    borrow:  share      = amount                          if total_share == 0
                        = ceil(amount * total_share / total_debt)  otherwise
    debt:    debt_of    = ceil(share * total_debt / total_share)
    repay:   less_share = share                           if paid == debt
                        = floor(paid * total_share / total_debt)   otherwise

Every rounding step favours the protocol: borrowers are never under-charged
shares, and an outstanding obligation is never understated.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
import logging
import threading

from .accrual import calculate_accrual, validate_fee_rate_bps
from .bank_registry import Bank, BankRegistry
from .core import (
    # Types
    AccrualResult, BankId, BankInfo, BorrowResult, DebtEvent, EventType,
    ExternalMarket, Oracle, PositionId, PositionInfo, RepayResult, ValuationFn,
    # Constants
    DEFAULT_FEE_RATE_BPS, MAX_BANKS, MAX_UINT256, REPAY_ALL,
    # Exceptions
    AccrualError, ArithmeticOverflow, DebtLedgerError, ExternalMarketFailure,
    InsufficientReserve, OverRepayment, ReentrancyViolation, UnknownPosition,
)
from .debt_mask import DebtMask, clear_bit, set_bit, test_bit
from .share_math import checked_add, checked_sub, mul_div_down, mul_div_up


logger = logging.getLogger(__name__)


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_debt(share: int, total_debt: int, total_share: int) -> int:
    """
    Debt owed for a share: ceil(share * total_debt / total_share).

    Returns 0 for an empty share or an empty bank.
    """
    if share == 0 or total_debt == 0 or total_share == 0:
        return 0
    return mul_div_up(share, total_debt, total_share)


def calculate_borrow(
    total_debt: int,
    total_share: int,
    position_share: int,
    amount: int,
) -> BorrowResult:
    """
    Compute the shares minted for borrowing amount and the resulting totals.

    PURE FUNCTION - All inputs explicit, no hidden state.

    Raises:
        ArithmeticOverflow: if any product or sum leaves the 256-bit domain,
            or shares exist against zero recorded debt
    """
    if total_share == 0:
        share = amount
    elif total_debt == 0:
        raise ArithmeticOverflow(
            f"{total_share} shares outstanding against zero debt; share price undefined"
        )
    else:
        share = mul_div_up(amount, total_share, total_debt)
    return BorrowResult(
        share=share,
        new_total_share=checked_add(total_share, share),
        new_total_debt=checked_add(total_debt, amount),
        new_position_share=checked_add(position_share, share),
    )


def calculate_repay(
    total_debt: int,
    total_share: int,
    position_share: int,
    amount: int,
) -> RepayResult:
    """
    Compute the shares burned for a repayment and the resulting totals.

    PURE FUNCTION - All inputs explicit, no hidden state.

    Args:
        total_debt: Bank total_debt (after accrual)
        total_share: Bank total_share
        position_share: Shares held by the repaying position
        amount: Amount to repay, or REPAY_ALL for the full outstanding debt

    Raises:
        OverRepayment: if amount exceeds the position's outstanding debt
    """
    old_debt = calculate_debt(position_share, total_debt, total_share)
    paid = old_debt if amount == REPAY_ALL else amount
    if paid > old_debt:
        raise OverRepayment(f"Repayment {paid} exceeds outstanding debt {old_debt}")

    # A full repayment burns every remaining share so no rounding dust is left
    if paid == old_debt:
        less_share = position_share
    else:
        less_share = mul_div_down(paid, total_share, total_debt)

    return RepayResult(
        paid=paid,
        less_share=less_share,
        old_debt=old_debt,
        new_total_share=checked_sub(total_share, less_share),
        new_total_debt=checked_sub(total_debt, paid),
        new_position_share=checked_sub(position_share, less_share),
    )


# ============================================================================
# POSITION RECORD
# ============================================================================

@dataclass(slots=True)
class Position:
    """
    Mutable position record owned by a DebtLedger.

    debt_mask bit i is set iff debt_shares holds a nonzero share for the bank
    with index i. Entries are removed when their share returns to zero.
    """
    position_id: PositionId
    owner: Any
    collateral_ref: Optional[str] = None
    collateral_amount: int = 0
    debt_shares: Dict[BankId, int] = field(default_factory=dict)
    debt_mask: int = 0

    def snapshot(self) -> PositionInfo:
        return PositionInfo(
            position_id=self.position_id,
            owner=self.owner,
            collateral_ref=self.collateral_ref,
            collateral_amount=self.collateral_amount,
            debt_shares=tuple(sorted(self.debt_shares.items())),
            debt_mask=self.debt_mask,
        )


# ============================================================================
# DEBT LEDGER
# ============================================================================

class DebtLedger:
    """
    Debt-share ledger with serialized execution and an event log.

    Design Principles:
        - Always accrues: every operation that reads or changes a bank's debt
          first syncs it with the external market.
        - All or nothing: the accrual and the operation are both computed
          first. Their market movements are netted into a single external
          call, and local state is committed last. A failure at any step
          leaves the ledger and the market unchanged.
        - One writer at a time: mutating operations hold the ledger's lock.
          Nested entry from the same thread (an external market calling back
          into the ledger) raises ReentrancyViolation.

    Example:
        ledger = DebtLedger("main")
        usdc = ledger.register(SimulatedMarket("USDC"))
        pid = ledger.open_position("alice")
        ledger.borrow(pid, usdc, 1000)      # -> 1000 shares
        ledger.debt_of(pid, usdc)           # -> 1000
        ledger.repay(pid, usdc, REPAY_ALL)  # -> (1000, 1000)
    """

    def __init__(
        self,
        name: str = "main",
        fee_rate_bps: int = DEFAULT_FEE_RATE_BPS,
        oracle: Optional[Oracle] = None,
        max_banks: int = MAX_BANKS,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier (used in log messages)
            fee_rate_bps: Share of accrued interest taken as protocol fee
            oracle: Default oracle for total_borrow_value()
            max_banks: Bank capacity, at most MAX_BANKS
        """
        self.name = name
        self.banks = BankRegistry(capacity=max_banks)
        self.positions: Dict[PositionId, Position] = {}
        self.oracle = oracle
        self._fee_rate_bps = validate_fee_rate_bps(fee_rate_bps)
        self._next_position_id: PositionId = 1
        self._events: List[DebtEvent] = []
        self._next_sequence: int = 0
        self._lock = threading.Lock()
        self._exec_thread: Optional[int] = None

    # ========================================================================
    # EXECUTION SCOPE
    # ========================================================================

    @contextmanager
    def _execution(self, operation: str) -> Iterator[None]:
        """
        Run one operation with exclusive access to ledger state.

        Other threads block until the in-flight operation finishes. The thread
        already inside an operation is rejected instead of deadlocking.
        """
        if self._exec_thread == threading.get_ident():
            raise ReentrancyViolation(
                f"{operation}() entered while another ledger operation is in flight"
            )
        with self._lock:
            self._exec_thread = threading.get_ident()
            try:
                yield
            finally:
                self._exec_thread = None

    def _call_market(self, bank: Bank, method: str, *args: int) -> int:
        """Call the bank's market, surfacing any failure as ExternalMarketFailure."""
        try:
            result = getattr(bank.market, method)(*args)
        except DebtLedgerError:
            raise
        except Exception as e:
            raise ExternalMarketFailure(f"{bank.bank_id}.{method}{args} failed: {e}") from e
        if isinstance(result, bool) or not isinstance(result, int) or not 0 <= result <= MAX_UINT256:
            raise ExternalMarketFailure(
                f"{bank.bank_id}.{method}{args} returned invalid amount {result!r}"
            )
        return result

    def _record(self, event_type: EventType, bank_id: BankId, **kwargs: Any) -> DebtEvent:
        event = DebtEvent(
            sequence_number=self._next_sequence,
            event_type=event_type,
            bank_id=bank_id,
            **kwargs,
        )
        self._next_sequence += 1
        self._events.append(event)
        return event

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    @property
    def fee_rate_bps(self) -> int:
        return self._fee_rate_bps

    @property
    def event_log(self) -> Tuple[DebtEvent, ...]:
        return tuple(self._events)

    def get_bank(self, bank_id: BankId) -> BankInfo:
        """
        Snapshot of a listed bank, as of its last accrual.

        Raises:
            UnknownBank: If the bank is not listed
        """
        return self.banks.get(bank_id)

    def list_banks(self) -> List[BankId]:
        return self.banks.bank_ids()

    def get_position(self, position_id: PositionId) -> PositionInfo:
        return self._position(position_id).snapshot()

    def debt_share_of(self, position_id: PositionId, bank_id: BankId) -> int:
        self.banks.bank(bank_id)
        return self._position(position_id).debt_shares.get(bank_id, 0)

    def debt_mask_of(self, position_id: PositionId) -> DebtMask:
        return DebtMask(self._position(position_id).debt_mask)

    def borrow_balance_stored(self, position_id: PositionId, bank_id: BankId) -> int:
        """
        Debt of a position as of the bank's last accrual.

        Does not contact the external market, so the figure may be stale.
        Use debt_of() for the current figure.
        """
        bank = self.banks.bank(bank_id)
        share = self._position(position_id).debt_shares.get(bank_id, 0)
        return calculate_debt(share, bank.total_debt, bank.total_share)

    def _position(self, position_id: PositionId) -> Position:
        position = self.positions.get(position_id)
        if position is None:
            raise UnknownPosition(f"Position {position_id} not found")
        return position

    # ========================================================================
    # REGISTRATION (Mutating)
    # ========================================================================

    def register(self, market: ExternalMarket) -> BankId:
        """
        List a bank for an external market.

        Returns:
            The stable bank id (the market's symbol)

        Raises:
            CapacityExceeded: If max_banks banks are already listed
            DuplicateMarket: If the market or its symbol is already listed
        """
        with self._execution("register"):
            bank_id = self.banks.register(market)
            bank = self.banks.bank(bank_id)
            self._record(EventType.ADD_BANK, bank_id, details={'index': bank.index})
            logger.info("[%s] Registered bank %s at index %d", self.name, bank_id, bank.index)
            return bank_id

    def open_position(
        self,
        owner: Any,
        collateral_ref: Optional[str] = None,
        collateral_amount: int = 0,
    ) -> PositionId:
        """Open an empty position and return its id (ids start at 1)."""
        if collateral_amount < 0:
            raise ValueError(f"collateral_amount must be non-negative, got {collateral_amount}")
        with self._execution("open_position"):
            position_id = self._next_position_id
            self._next_position_id += 1
            self.positions[position_id] = Position(
                position_id=position_id,
                owner=owner,
                collateral_ref=collateral_ref,
                collateral_amount=collateral_amount,
            )
            logger.debug("[%s] Opened position %d for %r", self.name, position_id, owner)
            return position_id

    def set_fee_rate_bps(self, fee_rate_bps: int) -> None:
        """
        Change the protocol fee rate for future accruals.

        Raises:
            ValueError: If fee_rate_bps is outside [0, 10000]
        """
        validate_fee_rate_bps(fee_rate_bps)
        with self._execution("set_fee_rate_bps"):
            self._fee_rate_bps = fee_rate_bps
            logger.info("[%s] Fee rate set to %d bps", self.name, fee_rate_bps)

    # ========================================================================
    # INTEREST ACCRUAL (Mutating)
    # ========================================================================

    def accrue(self, bank_id: BankId) -> AccrualResult:
        """
        Sync a bank's total debt with its market and collect the protocol fee.

        Calling accrue twice with no external change in between is a no-op the
        second time: the fee borrowed by the first call is already part of the
        market's reported debt.

        Raises:
            UnknownBank: If the bank is not listed
            ExternalMarketFailure: If the market cannot report its debt or
                does not disburse the fee exactly
        """
        with self._execution("accrue"):
            return self._accrue(self.banks.bank(bank_id))

    def accrue_many(self, bank_ids: Sequence[BankId]) -> List[AccrualResult]:
        """
        Accrue each bank in order, stopping at the first failure.

        Banks accrued before the failure keep their new state.

        Raises:
            AccrualError: Naming the bank that failed; the original error is
                chained as __cause__
        """
        results = []
        with self._execution("accrue_many"):
            for bank_id in bank_ids:
                try:
                    results.append(self._accrue(self.banks.bank(bank_id)))
                except DebtLedgerError as e:
                    raise AccrualError(bank_id, f"Accrual failed for bank {bank_id}: {e}") from e
        return results

    def _accrue(self, bank: Bank) -> AccrualResult:
        accrual = self._plan_accrual(bank)
        new_reserve = checked_add(bank.reserve, accrual.fee)
        self._settle(bank, draw=accrual.fee, pay=0)
        self._commit_accrual(bank, accrual, new_reserve)
        return accrual

    def _plan_accrual(self, bank: Bank) -> AccrualResult:
        """Read the market's debt and compute the accrual without applying it."""
        observed = self._call_market(bank, "current_debt")
        return calculate_accrual(bank.total_debt, observed, self._fee_rate_bps)

    def _commit_accrual(self, bank: Bank, accrual: AccrualResult, new_reserve: int) -> None:
        """Apply a planned accrual. Any change of total_debt is recorded as ACCRUE."""
        if accrual.new_total_debt == bank.total_debt:
            logger.debug("[%s] Bank %s accrual no-op at %d", self.name, bank.bank_id, bank.total_debt)
            return

        if accrual.new_total_debt < bank.total_debt:
            logger.warning(
                "[%s] Bank %s external debt fell outside the ledger: %d -> %d",
                self.name, bank.bank_id, bank.total_debt, accrual.new_total_debt,
            )
        else:
            logger.info(
                "[%s] Accrued %s: interest=%d fee=%d total_debt=%d",
                self.name, bank.bank_id, accrual.interest, accrual.fee, accrual.new_total_debt,
            )
        bank.total_debt = accrual.new_total_debt
        bank.reserve = new_reserve
        self._record(
            EventType.ACCRUE, bank.bank_id,
            amount=accrual.fee,
            details={'interest': accrual.interest, 'total_debt': accrual.new_total_debt},
        )

    def _settle(self, bank: Bank, draw: int, pay: int) -> None:
        """
        Make the single market call an operation needs.

        draw is everything the operation borrows (amount plus accrual fee) and
        pay is what it repays. Only the difference is sent to the market, so
        an operation either moves funds once or not at all.

        Raises:
            ExternalMarketFailure: If the call fails or moves any other amount;
                requested and moved are set on the error
        """
        if draw > pay:
            method, requested = "borrow", draw - pay
        elif pay > draw:
            method, requested = "repay", pay - draw
        else:
            return
        moved = self._call_market(bank, method, requested)
        if moved != requested:
            raise ExternalMarketFailure(
                f"{bank.bank_id}: {method} of {requested} moved {moved}",
                requested=requested, moved=moved,
            )

    # ========================================================================
    # BORROW / REPAY (Mutating)
    # ========================================================================

    def borrow(self, position_id: PositionId, bank_id: BankId, amount: int) -> int:
        """
        Borrow amount from a bank on behalf of a position.

        Returns:
            The number of debt shares minted

        Raises:
            ValueError: If amount is not a positive integer
            UnknownBank, UnknownPosition: For unknown identifiers
            ArithmeticOverflow: If share math leaves the 256-bit domain
            ExternalMarketFailure: If the market does not disburse exactly amount
                plus any accrual fee
        """
        _require_amount(amount, allow_zero=False)
        with self._execution("borrow"):
            position = self._position(position_id)
            bank = self.banks.bank(bank_id)
            accrual = self._plan_accrual(bank)
            new_reserve = checked_add(bank.reserve, accrual.fee)

            plan = calculate_borrow(
                accrual.new_total_debt, bank.total_share,
                position.debt_shares.get(bank_id, 0), amount,
            )
            logger.debug(
                "[%s] Borrow plan pos=%d %s amount=%d share=%d",
                self.name, position_id, bank_id, amount, plan.share,
            )

            self._settle(bank, draw=checked_add(amount, accrual.fee), pay=0)
            self._commit_accrual(bank, accrual, new_reserve)

            bank.total_share = plan.new_total_share
            bank.total_debt = plan.new_total_debt
            self._set_share(position, bank, plan.new_position_share)
            self._record(
                EventType.BORROW, bank_id,
                position_id=position_id, amount=amount, share=plan.share,
            )
            logger.info(
                "[%s] Position %d borrowed %d %s (share=%d)",
                self.name, position_id, amount, bank_id, plan.share,
            )
            return plan.share

    def repay(
        self,
        position_id: PositionId,
        bank_id: BankId,
        amount: int = REPAY_ALL,
    ) -> Tuple[int, int]:
        """
        Repay a position's debt in a bank.

        Args:
            position_id: Position whose debt is repaid
            bank_id: Bank the debt is owed to
            amount: Amount to repay, or REPAY_ALL (default) for the full debt

        Returns:
            (paid, less_share): amount repaid and debt shares burned

        Raises:
            OverRepayment: If amount exceeds the outstanding debt
            ExternalMarketFailure: If the market does not move exactly the netted
                amount (paid less any accrual fee)
        """
        with self._execution("repay"):
            paid, less_share = self._repay(position_id, bank_id, amount)
            self._record(
                EventType.REPAY, bank_id,
                position_id=position_id, amount=paid, share=less_share,
            )
            logger.info(
                "[%s] Position %d repaid %d %s (burned %d shares)",
                self.name, position_id, paid, bank_id, less_share,
            )
            return paid, less_share

    def liquidation_repay(
        self,
        position_id: PositionId,
        bank_id: BankId,
        amount: int = REPAY_ALL,
        liquidator: Any = None,
    ) -> Tuple[int, int]:
        """
        Repay a position's debt on behalf of a third-party liquidator.

        There is no ownership check: deciding whether the position may be
        liquidated is the caller's job. The repayment obeys the same
        OverRepayment bound as repay(), and the returned (paid, less_share)
        is what the caller uses to size the collateral bounty.
        """
        with self._execution("liquidation_repay"):
            paid, less_share = self._repay(position_id, bank_id, amount)
            self._record(
                EventType.LIQUIDATE, bank_id,
                position_id=position_id, amount=paid, share=less_share,
                details={'liquidator': liquidator},
            )
            logger.info(
                "[%s] Liquidator %r repaid %d %s for position %d (burned %d shares)",
                self.name, liquidator, paid, bank_id, position_id, less_share,
            )
            return paid, less_share

    def _repay(self, position_id: PositionId, bank_id: BankId, amount: int) -> Tuple[int, int]:
        if amount != REPAY_ALL:
            _require_amount(amount, allow_zero=True)
        position = self._position(position_id)
        bank = self.banks.bank(bank_id)
        accrual = self._plan_accrual(bank)
        new_reserve = checked_add(bank.reserve, accrual.fee)

        plan = calculate_repay(
            accrual.new_total_debt, bank.total_share,
            position.debt_shares.get(bank_id, 0), amount,
        )

        # The fee is borrowed and the repayment applied in one netted call
        self._settle(bank, draw=accrual.fee, pay=plan.paid)
        self._commit_accrual(bank, accrual, new_reserve)

        bank.total_share = plan.new_total_share
        bank.total_debt = plan.new_total_debt
        self._set_share(position, bank, plan.new_position_share)
        return plan.paid, plan.less_share

    @staticmethod
    def _set_share(position: Position, bank: Bank, share: int) -> None:
        """Store a position's share and keep its debt mask bit in step."""
        if share:
            position.debt_shares[bank.bank_id] = share
            position.debt_mask = set_bit(position.debt_mask, bank.index)
        else:
            position.debt_shares.pop(bank.bank_id, None)
            position.debt_mask = clear_bit(position.debt_mask, bank.index)

    # ========================================================================
    # VALUATION
    # ========================================================================

    def debt_of(self, position_id: PositionId, bank_id: BankId) -> int:
        """
        Current debt of a position in one bank (accrues the bank first).

        Returns 0 when the position holds no share or the bank has no debt.
        """
        with self._execution("debt_of"):
            position = self._position(position_id)
            bank = self.banks.bank(bank_id)
            self._accrue(bank)
            return calculate_debt(
                position.debt_shares.get(bank_id, 0), bank.total_debt, bank.total_share,
            )

    def list_debts(self, position_id: PositionId) -> List[Tuple[BankId, int]]:
        """
        Current debts of a position, in ascending bank index order.

        Only banks whose bit is set in the position's debt mask are visited.
        """
        with self._execution("list_debts"):
            position = self._position(position_id)
            debts = []
            for index in DebtMask(position.debt_mask):
                bank = self.banks.bank_at(index)
                self._accrue(bank)
                debts.append((
                    bank.bank_id,
                    calculate_debt(
                        position.debt_shares.get(bank.bank_id, 0),
                        bank.total_debt, bank.total_share,
                    ),
                ))
            return debts

    def total_borrow_value(
        self,
        position_id: PositionId,
        valuation_fn: Optional[ValuationFn] = None,
    ) -> Decimal:
        """
        Total value of a position's debts in the oracle's common unit.

        Args:
            position_id: Position to value
            valuation_fn: valuation_fn(bank_id, amount, owner) -> Decimal.
                Defaults to the ledger oracle's value_in_common_unit.

        Raises:
            ValueError: If no valuation_fn is given and no oracle is configured
        """
        if valuation_fn is None:
            if self.oracle is None:
                raise ValueError("No valuation_fn given and no oracle configured")
            valuation_fn = self.oracle.value_in_common_unit

        debts = self.list_debts(position_id)
        owner = self._position(position_id).owner
        total = Decimal("0")
        for bank_id, amount in debts:
            total += valuation_fn(bank_id, amount, owner)
        return total

    # ========================================================================
    # RESERVE (Mutating)
    # ========================================================================

    def withdraw_reserve(self, bank_id: BankId, amount: int) -> int:
        """
        Withdraw accumulated protocol fees from a bank's reserve.

        Raises:
            InsufficientReserve: If amount exceeds the bank's reserve
        """
        _require_amount(amount, allow_zero=True)
        with self._execution("withdraw_reserve"):
            bank = self.banks.bank(bank_id)
            if amount > bank.reserve:
                raise InsufficientReserve(
                    f"{bank_id}: withdraw {amount} exceeds reserve {bank.reserve}"
                )
            bank.reserve -= amount
            self._record(EventType.WITHDRAW_RESERVE, bank_id, amount=amount)
            logger.info("[%s] Withdrew %d from %s reserve", self.name, amount, bank_id)
            return amount

    # ========================================================================
    # AUDIT
    # ========================================================================

    def verify_share_conservation(self) -> Dict[str, Any]:
        """
        Verify share conservation and mask consistency across all positions.

        Checks:
        1. For every bank, total_share equals the sum of position shares
        2. For every position, mask bit i is set iff its share in bank i is nonzero
        3. No mask bit is set for an index with no registered bank

        Returns:
            Dict with keys:
            - 'valid': bool - True if every check holds
            - 'discrepancies': List[Dict] - details of each violation

        Example:
            result = ledger.verify_share_conservation()
            assert result['valid'], result['discrepancies']
        """
        discrepancies = []
        share_sums = {bank.bank_id: 0 for bank in self.banks}

        for position in self.positions.values():
            for bank_id, share in position.debt_shares.items():
                share_sums[bank_id] = share_sums.get(bank_id, 0) + share

            for bank in self.banks:
                has_share = position.debt_shares.get(bank.bank_id, 0) != 0
                if test_bit(position.debt_mask, bank.index) != has_share:
                    discrepancies.append({
                        'check': 'mask',
                        'position_id': position.position_id,
                        'bank_id': bank.bank_id,
                        'bit_set': not has_share,
                        'share': position.debt_shares.get(bank.bank_id, 0),
                    })
            stray = position.debt_mask >> len(self.banks)
            if stray:
                discrepancies.append({
                    'check': 'mask',
                    'position_id': position.position_id,
                    'unregistered_bits': [len(self.banks) + i for i in DebtMask(stray)],
                })

        for bank in self.banks:
            if share_sums.get(bank.bank_id, 0) != bank.total_share:
                discrepancies.append({
                    'check': 'shares',
                    'bank_id': bank.bank_id,
                    'total_share': bank.total_share,
                    'sum_of_positions': share_sums.get(bank.bank_id, 0),
                })

        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }


def _require_amount(amount: int, allow_zero: bool) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an int, got {type(amount).__name__}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValueError(f"Amount must be {'non-negative' if allow_zero else 'positive'}, got {amount}")
    if amount > MAX_UINT256:
        raise ArithmeticOverflow(f"Amount {amount} outside unsigned 256-bit domain")
