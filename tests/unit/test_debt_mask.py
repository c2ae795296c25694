"""
test_debt_mask.py - Unit tests for the active-debt bitmask

Tests:
- set / clear / test on single bits and the 0 and 255 boundaries
- Index validation
- Ascending, lazy, restartable enumeration
- DebtMask value semantics
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from debtledger import debt_mask
from debtledger.debt_mask import DebtMask, iter_bits, set_bit, clear_bit


class TestBitOperations:
    """Tests for set_bit, clear_bit and test_bit."""

    def test_set_and_test(self):
        mask = set_bit(0, 3)
        assert mask == 0b1000
        assert debt_mask.test_bit(mask, 3)
        assert not debt_mask.test_bit(mask, 2)

    def test_clear(self):
        mask = set_bit(set_bit(0, 1), 4)
        assert clear_bit(mask, 1) == 0b10000

    def test_clear_unset_bit_is_noop(self):
        assert clear_bit(0b101, 1) == 0b101

    def test_set_is_idempotent(self):
        assert set_bit(set_bit(0, 7), 7) == set_bit(0, 7)

    def test_boundaries(self):
        mask = set_bit(set_bit(0, 0), 255)
        assert debt_mask.test_bit(mask, 0)
        assert debt_mask.test_bit(mask, 255)
        assert mask.bit_length() == 256

    @pytest.mark.parametrize("index", [-1, 256, 1000])
    def test_out_of_range_index(self, index):
        with pytest.raises(ValueError):
            set_bit(0, index)
        with pytest.raises(ValueError):
            clear_bit(0, index)
        with pytest.raises(ValueError):
            debt_mask.test_bit(0, index)


class TestEnumeration:
    """Tests for iter_bits and DebtMask iteration."""

    def test_empty_mask(self):
        assert list(iter_bits(0)) == []

    def test_ascending_order(self):
        mask = set_bit(set_bit(set_bit(0, 200), 5), 64)
        assert list(iter_bits(mask)) == [5, 64, 200]

    def test_is_lazy(self):
        gen = iter_bits(0b1011)
        assert next(gen) == 0
        assert next(gen) == 1
        assert next(gen) == 3
        with pytest.raises(StopIteration):
            next(gen)

    def test_debt_mask_is_restartable(self):
        mask = DebtMask(0b1010)
        assert list(mask) == [1, 3]
        assert list(mask) == [1, 3]

    @given(st.sets(st.integers(min_value=0, max_value=255), max_size=40))
    @settings(max_examples=100)
    def test_enumerates_exactly_the_set_bits(self, indices):
        mask = 0
        for i in indices:
            mask = set_bit(mask, i)
        assert list(iter_bits(mask)) == sorted(indices)
        assert len(DebtMask(mask)) == len(indices)


class TestDebtMask:
    """Tests for the DebtMask value type."""

    def test_with_and_without_bit(self):
        mask = DebtMask().with_bit(2).with_bit(9)
        assert list(mask) == [2, 9]
        assert list(mask.without_bit(2)) == [9]
        # Original is unchanged
        assert list(mask) == [2, 9]

    def test_contains(self):
        mask = DebtMask(0b100)
        assert 2 in mask
        assert 1 not in mask
        assert 300 not in mask
        assert "2" not in mask

    def test_bool_and_len(self):
        assert not DebtMask()
        assert len(DebtMask()) == 0
        assert DebtMask(1)
        assert len(DebtMask(0b111)) == 3

    def test_rejects_oversized_word(self):
        with pytest.raises(ValueError):
            DebtMask(1 << 256)
        with pytest.raises(ValueError):
            DebtMask(-1)

    def test_repr(self):
        assert repr(DebtMask(0b101)) == "DebtMask([0, 2])"
