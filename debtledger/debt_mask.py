"""
debt_mask.py - Active-debt bitmask index

A position's active debts are recorded in a single 256-bit word: bit i is set
iff the position holds a nonzero debt share in the bank with index i. Reads
enumerate only the set bits, so their cost is proportional to the number of
active debts rather than to the number of listed banks.

The mask width is a hard ceiling (MASK_WIDTH banks). Lifting it means a wider
multi-word mask or a sorted set of active indices.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator

from .core import MASK_WIDTH


def _check_index(i: int) -> None:
    if not 0 <= i < MASK_WIDTH:
        raise ValueError(f"Bit index {i} outside [0, {MASK_WIDTH - 1}]")


def set_bit(mask: int, i: int) -> int:
    _check_index(i)
    return mask | (1 << i)


def clear_bit(mask: int, i: int) -> int:
    _check_index(i)
    return mask & ~(1 << i)


def test_bit(mask: int, i: int) -> bool:
    _check_index(i)
    return (mask >> i) & 1 == 1


def iter_bits(mask: int) -> Iterator[int]:
    """
    Yield the indices of set bits in ascending order.

    Lazy: each step isolates the lowest set bit, so only set bits are visited.
    """
    remaining = mask
    while remaining:
        lowest = remaining & -remaining
        yield lowest.bit_length() - 1
        remaining ^= lowest


@dataclass(frozen=True, slots=True)
class DebtMask:
    """
    Immutable view over a stored debt mask.

    Iteration is restartable: every call to iter() enumerates again from the
    stored word, so the same DebtMask can be walked any number of times.

    Example:
        mask = DebtMask(0b1010)
        list(mask)   # [1, 3]
        list(mask)   # [1, 3] again
        3 in mask    # True
    """
    word: int = 0

    def __post_init__(self):
        if self.word < 0 or self.word >> MASK_WIDTH:
            raise ValueError(f"Mask does not fit in {MASK_WIDTH} bits")

    def with_bit(self, i: int) -> DebtMask:
        return DebtMask(set_bit(self.word, i))

    def without_bit(self, i: int) -> DebtMask:
        return DebtMask(clear_bit(self.word, i))

    def __iter__(self) -> Iterator[int]:
        return iter_bits(self.word)

    def __contains__(self, i: object) -> bool:
        return isinstance(i, int) and 0 <= i < MASK_WIDTH and test_bit(self.word, i)

    def __len__(self) -> int:
        return bin(self.word).count("1")

    def __bool__(self) -> bool:
        return self.word != 0

    def __repr__(self) -> str:
        return f"DebtMask({list(self)})"
