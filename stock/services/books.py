from __future__ import annotations

import logging

from milling.models import Outturn

from .byproducts import ByProductYield, aggregate_by_products
from .clearing import ClearedOutturnFilter
from .driver import ReconciliationRequest, ReconciliationResult, run
from .reconciliation import PaddyReconciliationEngine
from .rice_stock import RiceStockEngine
from .sources import (
    fetch_by_product_entries,
    fetch_clearing_events,
    fetch_opening_balance,
    fetch_paddy_events,
    fetch_rice_events,
    outturn_paddy_input_quintals,
)

logger = logging.getLogger(__name__)


def paddy_stock_book(request: ReconciliationRequest) -> ReconciliationResult:
    """Day-by-day paddy stock for ``request``.

    A range with a start date is seeded from the opening balance on that
    date, so only the events inside the range are loaded.
    """
    start, end = request.resolved_range()
    engine = PaddyReconciliationEngine(clearings=ClearedOutturnFilter(fetch_clearing_events()))
    opening = None
    if start is not None:
        opening = fetch_opening_balance(start).ledger
    events = fetch_paddy_events(start, end)
    logger.debug("Paddy book %s..%s: %s events", start, end, len(events))
    return run(request, engine, events, opening=opening)


def rice_stock_book(request: ReconciliationRequest) -> ReconciliationResult:
    """Day-by-day rice stock; history before the range is folded in."""
    _, end = request.resolved_range()
    events = fetch_rice_events(date_to=end)
    return run(request, RiceStockEngine(), events)


def outturn_by_products(code: str) -> ByProductYield:
    outturn = Outturn.objects.get(code=code)
    return aggregate_by_products(
        outturn.code,
        fetch_by_product_entries(outturn),
        outturn_paddy_input_quintals(outturn),
    )
