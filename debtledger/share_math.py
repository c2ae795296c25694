"""
share_math.py - Overflow-checked unsigned integer arithmetic

Exact integer primitives used for every share/debt conversion. All operands
and results live in the unsigned 256-bit domain [0, MAX_UINT256]; anything
outside it raises ArithmeticOverflow rather than silently wrapping.

Rounding direction is the caller's decision and always favours the protocol:
    - mul_div_up: shares minted on borrow, debt owed by a position
    - mul_div_down: shares burned on partial repayment, fees
"""

from __future__ import annotations

from .core import MAX_UINT256, ArithmeticOverflow


def _check_operand(name: str, value: int) -> None:
    if value < 0 or value > MAX_UINT256:
        raise ArithmeticOverflow(f"{name}={value} outside unsigned 256-bit domain")


def checked_add(a: int, b: int) -> int:
    """Add two unsigned integers, raising ArithmeticOverflow past MAX_UINT256."""
    _check_operand("a", a)
    _check_operand("b", b)
    result = a + b
    if result > MAX_UINT256:
        raise ArithmeticOverflow(f"{a} + {b} overflows")
    return result


def checked_sub(a: int, b: int) -> int:
    """Subtract b from a, raising ArithmeticOverflow on underflow."""
    _check_operand("a", a)
    _check_operand("b", b)
    if b > a:
        raise ArithmeticOverflow(f"{a} - {b} underflows")
    return a - b


def checked_mul(a: int, b: int) -> int:
    """Multiply two unsigned integers, raising ArithmeticOverflow past MAX_UINT256."""
    _check_operand("a", a)
    _check_operand("b", b)
    if b != 0 and a > MAX_UINT256 // b:
        raise ArithmeticOverflow(f"{a} * {b} overflows")
    return a * b


def ceil_div(a: int, b: int) -> int:
    """
    Divide rounding up.

    Raises:
        ZeroDivisionError: if b is zero
    """
    _check_operand("a", a)
    _check_operand("b", b)
    if b == 0:
        raise ZeroDivisionError("ceil_div by zero")
    return (a + b - 1) // b if a else 0


def mul_div_down(a: int, b: int, denominator: int) -> int:
    """
    Compute floor(a * b / denominator).

    The intermediate product must itself fit the 256-bit domain, matching the
    arithmetic the bookkeeping was specified against.
    """
    return checked_mul(a, b) // _nonzero(denominator)


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """Compute ceil(a * b / denominator) with the same overflow rules as mul_div_down."""
    return ceil_div(checked_mul(a, b), _nonzero(denominator))


def _nonzero(denominator: int) -> int:
    _check_operand("denominator", denominator)
    if denominator == 0:
        raise ZeroDivisionError("division by zero")
    return denominator
