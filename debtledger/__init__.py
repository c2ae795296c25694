"""
debtledger - Share-based debt accounting for lending banks

Tracks, per lending bank and per position, how much is owed and how that
amount grows with interest accrued in an external lending market.

Usage:
    from debtledger import DebtLedger, SimulatedMarket, REPAY_ALL

    ledger = DebtLedger("main")
    market = SimulatedMarket("USDC")
    usdc = ledger.register(market)

    pid = ledger.open_position("alice")
    ledger.borrow(pid, usdc, 1000)          # mints 1000 debt shares

    market.add_interest(100)                # interest accrues externally
    ledger.debt_of(pid, usdc)               # -> 1110 (100 interest + 10 fee)

    ledger.repay(pid, usdc, REPAY_ALL)      # -> (1110, 1000)
"""

# Core types
from .core import (
    ExternalMarket,
    Oracle,
    BankInfo,
    PositionInfo,
    AccrualResult,
    BorrowResult,
    RepayResult,
    DebtEvent,
    EventType,
    DebtLedgerError,
    UnknownBank,
    UnknownPosition,
    CapacityExceeded,
    DuplicateMarket,
    OverRepayment,
    ArithmeticOverflow,
    ExternalMarketFailure,
    InsufficientReserve,
    ReentrancyViolation,
    AccrualError,
    MAX_UINT256,
    MAX_BANKS,
    MASK_WIDTH,
    BPS_DENOMINATOR,
    DEFAULT_FEE_RATE_BPS,
    REPAY_ALL,
)

# Arithmetic
from .share_math import (
    ceil_div,
    mul_div_down,
    mul_div_up,
    checked_add,
    checked_sub,
    checked_mul,
)

# Active-debt mask
from .debt_mask import DebtMask, iter_bits

# Banks and accrual
from .bank_registry import Bank, BankRegistry
from .accrual import calculate_accrual, validate_fee_rate_bps

# Ledger
from .debt_ledger import (
    DebtLedger,
    Position,
    calculate_debt,
    calculate_borrow,
    calculate_repay,
)

# Collaborators
from .markets import SimulatedMarket
from .oracle import StaticOracle

__all__ = [
    # Core
    'ExternalMarket', 'Oracle',
    'BankInfo', 'PositionInfo', 'AccrualResult', 'BorrowResult', 'RepayResult',
    'DebtEvent', 'EventType',
    'DebtLedgerError', 'UnknownBank', 'UnknownPosition', 'CapacityExceeded',
    'DuplicateMarket', 'OverRepayment', 'ArithmeticOverflow', 'ExternalMarketFailure',
    'InsufficientReserve', 'ReentrancyViolation', 'AccrualError',
    'MAX_UINT256', 'MAX_BANKS', 'MASK_WIDTH', 'BPS_DENOMINATOR',
    'DEFAULT_FEE_RATE_BPS', 'REPAY_ALL',
    # Arithmetic
    'ceil_div', 'mul_div_down', 'mul_div_up', 'checked_add', 'checked_sub', 'checked_mul',
    # Mask
    'DebtMask', 'iter_bits',
    # Banks and accrual
    'Bank', 'BankRegistry', 'calculate_accrual', 'validate_fee_rate_bps',
    # Ledger
    'DebtLedger', 'Position', 'calculate_debt', 'calculate_borrow', 'calculate_repay',
    # Collaborators
    'SimulatedMarket', 'StaticOracle',
]

__version__ = '1.0.0'
