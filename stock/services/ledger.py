from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Iterator, Mapping

from .events import TWO_PLACES, ZERO, StockKey

logger = logging.getLogger(__name__)


class StockLedger:
    """Non-negative balances keyed by :class:`StockKey`.

    A debit larger than the balance clamps the balance to zero instead of
    failing; ``apply`` reports the clamp so callers can skip dependent
    credits. Balances that reach zero are dropped.
    """

    def __init__(self, balances: Mapping[StockKey, Decimal] | None = None) -> None:
        self._balances: dict[StockKey, Decimal] = {}
        for key, quantity in (balances or {}).items():
            if quantity < 0:
                logger.warning("Negative opening balance %s for %s ignored", quantity, key.label)
                continue
            if quantity > 0:
                self._balances[key] = Decimal(quantity)

    def get(self, key: StockKey) -> Decimal:
        return self._balances.get(key, ZERO)

    def apply(self, key: StockKey, delta: Decimal) -> bool:
        current = self.get(key)
        new_balance = current + delta
        if new_balance < 0:
            logger.warning(
                "Insufficient stock for %s: balance %s, debit %s. Clamped to zero.",
                key.label,
                current,
                -delta,
            )
            self._balances.pop(key, None)
            return False
        if new_balance == 0:
            self._balances.pop(key, None)
        else:
            self._balances[key] = new_balance
        return True

    def write_off(self, key: StockKey) -> Decimal:
        return self._balances.pop(key, ZERO)

    def keys_for_outturn(self, outturn: str) -> list[StockKey]:
        return sorted(key for key in self._balances if key.outturn == outturn)

    def keys_for_kunchinittu(self, kunchinittu: str, *, include_production: bool = False) -> list[StockKey]:
        return sorted(
            key
            for key in self._balances
            if key.kunchinittu == kunchinittu and (include_production or not key.is_production)
        )

    def copy(self) -> "StockLedger":
        clone = StockLedger()
        clone._balances = dict(self._balances)
        return clone

    def filtered(self, predicate: Callable[[StockKey], bool]) -> "StockLedger":
        clone = StockLedger()
        clone._balances = {key: quantity for key, quantity in self._balances.items() if predicate(key)}
        return clone

    def partition(self) -> tuple["StockLedger", "StockLedger"]:
        """Split into (warehouse, production) ledgers."""
        return (
            self.filtered(lambda key: not key.is_production),
            self.filtered(lambda key: key.is_production),
        )

    def total(self, predicate: Callable[[StockKey], bool] | None = None) -> Decimal:
        return sum(
            (quantity for key, quantity in self._balances.items() if predicate is None or predicate(key)),
            ZERO,
        )

    def deltas_from(self, other: "StockLedger") -> dict[StockKey, Decimal]:
        deltas: dict[StockKey, Decimal] = {}
        for key in sorted(set(self._balances) | set(other._balances)):
            delta = self.get(key) - other.get(key)
            if delta != 0:
                deltas[key] = delta
        return deltas

    def items(self) -> list[tuple[StockKey, Decimal]]:
        return sorted(self._balances.items())

    def as_dict(self) -> dict[StockKey, Decimal]:
        return dict(self._balances)

    def as_labels(self) -> dict[str, Decimal]:
        return {key.label: quantity.quantize(TWO_PLACES) for key, quantity in self.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._balances

    def __iter__(self) -> Iterator[StockKey]:
        return iter(sorted(self._balances))

    def __len__(self) -> int:
        return len(self._balances)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StockLedger):
            return NotImplemented
        return self._balances == other._balances

    def __repr__(self) -> str:
        return f"StockLedger({self.as_labels()!r})"
