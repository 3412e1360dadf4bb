from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from .events import ClearingEvent, StockKey
from .ledger import StockLedger

logger = logging.getLogger(__name__)


class ClearedOutturnFilter:
    """Removes the paddy of cleared outturns from daily stock.

    On the clearing day the outturn still shows in the opening stock but not
    in the closing stock; from the next day on it is gone from both.
    """

    def __init__(self, clearings: Iterable[ClearingEvent] = ()) -> None:
        self._effective: dict[str, date] = {}
        for clearing in clearings:
            previous = self._effective.get(clearing.outturn)
            if previous and previous != clearing.effective_date:
                logger.warning(
                    "Outturn %s cleared twice (%s and %s); using the earlier date",
                    clearing.outturn,
                    previous,
                    clearing.effective_date,
                )
            if previous is None or clearing.effective_date < previous:
                self._effective[clearing.outturn] = clearing.effective_date

    def effective_date(self, outturn: str) -> date | None:
        return self._effective.get(outturn)

    def hidden_in_opening(self, key: StockKey, day: date) -> bool:
        effective = self._effective.get(key.outturn) if key.outturn else None
        return effective is not None and effective < day

    def hidden_in_closing(self, key: StockKey, day: date) -> bool:
        effective = self._effective.get(key.outturn) if key.outturn else None
        return effective is not None and effective <= day

    def filter_opening(self, ledger: StockLedger, day: date) -> dict[StockKey, Decimal]:
        return self._remove(ledger, day, self.hidden_in_opening)

    def filter_closing(self, ledger: StockLedger, day: date) -> dict[StockKey, Decimal]:
        return self._remove(ledger, day, self.hidden_in_closing)

    def _remove(self, ledger: StockLedger, day: date, hidden) -> dict[StockKey, Decimal]:
        if not self._effective:
            return {}
        removed: dict[StockKey, Decimal] = {}
        for key in list(ledger):
            if hidden(key, day):
                removed[key] = ledger.write_off(key)
        return removed
