"""
oracle.py - Price oracle for debt valuation

Converts raw token amounts into a common valuation unit (typically USD) for
DebtLedger.total_borrow_value().

Classes:
- StaticOracle: Fixed price per whole token, with per-token decimals

The ledger only depends on the Oracle protocol in core.py; any object with a
value_in_common_unit(bank_id, amount, owner) method can be used instead.
"""

from decimal import Decimal
from typing import Any, Dict, Optional


class StaticOracle:
    """
    Oracle with static prices (owner-independent).

    Prices are quoted per whole token; amounts are in the token's smallest
    unit, scaled by its decimals.

    Example:
        oracle = StaticOracle({"USDC": Decimal("1"), "WETH": Decimal("2500")},
                              decimals={"USDC": 6, "WETH": 18})
        oracle.value_in_common_unit("WETH", 2 * 10**18, "alice")   # Decimal("5000")
    """

    def __init__(
        self,
        prices: Dict[str, Decimal],
        decimals: Optional[Dict[str, int]] = None,
        base_currency: str = "USD",
    ):
        """
        Args:
            prices: Dictionary mapping token symbols to prices in base currency
            decimals: Token symbol -> decimals (missing symbols use 0)
            base_currency: The currency in which prices are quoted
        """
        self.base_currency = base_currency
        self.prices = {k: Decimal(str(v)) for k, v in prices.items()}
        self.decimals = dict(decimals or {})

    def get_price(self, symbol: str) -> Optional[Decimal]:
        return self.prices.get(symbol)

    def value_in_common_unit(self, bank_id: str, amount: int, owner: Any = None) -> Decimal:
        """
        Value amount of a token in the base currency.

        Raises:
            ValueError: if no price is known for the token
        """
        price = self.prices.get(bank_id)
        if price is None:
            raise ValueError(f"Missing price for token '{bank_id}'")
        scale = Decimal(10) ** self.decimals.get(bank_id, 0)
        return Decimal(amount) * price / scale

    def update_price(self, symbol: str, price: Decimal):
        """Update the price of a token."""
        self.prices[symbol] = Decimal(str(price))

    def update_prices(self, prices: Dict[str, Decimal]):
        """Update multiple prices at once."""
        for symbol, price in prices.items():
            self.update_price(symbol, price)

    def __repr__(self):
        return f"StaticOracle({len(self.prices)} prices, base={self.base_currency})"
