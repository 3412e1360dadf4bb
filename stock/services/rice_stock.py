from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .events import MovementEvent, MovementKind, PostingGroup, RiceProductionEvent, rice_postings
from .reconciliation import LedgerReplayEngine, outturn_varieties


class RiceStockEngine(LedgerReplayEngine):
    """Daily rice stock in quintals, keyed by variety, location, product
    type and packaging.

    Production and purchases are credited before palti and sales so that a
    day's output can be repacked or dispatched the same day.
    """

    kind_order = (
        MovementKind.RICE_PRODUCTION,
        MovementKind.RICE_PURCHASE,
        MovementKind.PALTI,
        MovementKind.SALE,
    )
    book = "rice"

    def __init__(self, *, history: Iterable[MovementEvent] = (), tolerance=None) -> None:
        super().__init__(tolerance=tolerance)
        self.outturn_varieties = outturn_varieties(history)

    def normalize(self, event: MovementEvent) -> PostingGroup | None:
        if isinstance(event, RiceProductionEvent) and not event.variety:
            event = replace(event, variety=self.outturn_varieties.get(event.outturn, ""))
        return rice_postings(event)
