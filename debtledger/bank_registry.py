"""
bank_registry.py - Bounded registry of lending banks

Each bank wraps one external lending market and keeps the aggregate
bookkeeping every position's debt is measured against:

    total_debt   debt owed to the market as of the last accrual
    total_share  sum of all positions' debt shares
    reserve      protocol fee balance

Banks receive sequential indices 0..MAX_BANKS-1 in registration order. The
index never changes and is never reused; it is the bit a position sets in its
debt mask. There is no removal.

The registry only stores state. Mutation of the totals happens through
DebtLedger, which serializes all writers.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Iterator

from .core import (
    BankId, BankInfo, ExternalMarket,
    MAX_BANKS,
    CapacityExceeded, DuplicateMarket, UnknownBank,
)


@dataclass(slots=True)
class Bank:
    """Mutable bank record owned by a BankRegistry."""
    bank_id: BankId
    index: int
    market: ExternalMarket
    listed: bool = True
    reserve: int = 0
    total_debt: int = 0
    total_share: int = 0

    def snapshot(self) -> BankInfo:
        return BankInfo(
            bank_id=self.bank_id,
            index=self.index,
            listed=self.listed,
            reserve=self.reserve,
            total_debt=self.total_debt,
            total_share=self.total_share,
        )


class BankRegistry:
    """
    Capacity-bounded set of banks with O(1) lookup by id and by index.

    Example:
        registry = BankRegistry()
        bank_id = registry.register(usdc_market)   # "USDC", index 0
        registry.get(bank_id).total_debt           # 0
    """

    def __init__(self, capacity: int = MAX_BANKS):
        if not 0 < capacity <= MAX_BANKS:
            raise ValueError(f"capacity must be in [1, {MAX_BANKS}], got {capacity}")
        self.capacity = capacity
        self._banks: Dict[BankId, Bank] = {}
        self._by_index: List[Bank] = []
        # id(market) -> bank_id, so a market object can back at most one bank
        self._market_binding: Dict[int, BankId] = {}

    @property
    def next_index(self) -> int:
        return len(self._by_index)

    def register(self, market: ExternalMarket) -> BankId:
        """
        List a new bank for an external market.

        Returns:
            The bank id (the market's symbol)

        Raises:
            CapacityExceeded: if the registry already holds `capacity` banks
            DuplicateMarket: if the market or its symbol is already listed
        """
        if len(self._by_index) >= self.capacity:
            raise CapacityExceeded(f"Bank capacity {self.capacity} reached")
        bank_id = market.symbol
        if id(market) in self._market_binding:
            raise DuplicateMarket(
                f"Market already bound to bank {self._market_binding[id(market)]}"
            )
        if bank_id in self._banks:
            raise DuplicateMarket(f"Bank {bank_id} already listed")

        bank = Bank(bank_id=bank_id, index=self.next_index, market=market)
        self._banks[bank_id] = bank
        self._by_index.append(bank)
        self._market_binding[id(market)] = bank_id
        return bank_id

    def bank(self, bank_id: BankId) -> Bank:
        """Return the mutable record for a listed bank."""
        bank = self._banks.get(bank_id)
        if bank is None or not bank.listed:
            raise UnknownBank(f"Bank {bank_id} not listed")
        return bank

    def get(self, bank_id: BankId) -> BankInfo:
        """Return a read-only snapshot of a listed bank."""
        return self.bank(bank_id).snapshot()

    def bank_at(self, index: int) -> Bank:
        if not 0 <= index < len(self._by_index):
            raise UnknownBank(f"No bank at index {index}")
        return self._by_index[index]

    def bank_ids(self) -> List[BankId]:
        """Listed bank ids in index order."""
        return [b.bank_id for b in self._by_index if b.listed]

    def __contains__(self, bank_id: object) -> bool:
        bank = self._banks.get(bank_id)  # type: ignore[arg-type]
        return bank is not None and bank.listed

    def __len__(self) -> int:
        return len(self._by_index)

    def __iter__(self) -> Iterator[Bank]:
        return iter(self._by_index)
