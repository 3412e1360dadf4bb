from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import SimpleTestCase

from stock.services.clearing import ClearedOutturnFilter
from stock.services.driver import replay
from stock.services.events import ClearingEvent, PaddyPurchase, StockKey
from stock.services.ledger import StockLedger
from stock.services.reconciliation import PaddyReconciliationEngine

CLEARED_ON = date(2024, 3, 10)
OUT01 = StockKey.production("RNR", "K1", "OUT01")
WAREHOUSE = StockKey.warehouse("RNR", "K1", "WH1")


class ClearedOutturnFilterTests(SimpleTestCase):
    def setUp(self) -> None:
        self.filter = ClearedOutturnFilter([ClearingEvent("OUT01", CLEARED_ON)])

    def test_opening_uses_strictly_before(self) -> None:
        self.assertFalse(self.filter.hidden_in_opening(OUT01, CLEARED_ON))
        self.assertTrue(self.filter.hidden_in_opening(OUT01, CLEARED_ON + timedelta(days=1)))

    def test_closing_uses_on_or_before(self) -> None:
        self.assertFalse(self.filter.hidden_in_closing(OUT01, CLEARED_ON - timedelta(days=1)))
        self.assertTrue(self.filter.hidden_in_closing(OUT01, CLEARED_ON))

    def test_keys_without_outturn_are_never_hidden(self) -> None:
        self.assertFalse(self.filter.hidden_in_closing(WAREHOUSE, CLEARED_ON + timedelta(days=30)))

    def test_filter_returns_removed_quantities(self) -> None:
        ledger = StockLedger({OUT01: Decimal("12"), WAREHOUSE: Decimal("7")})
        removed = self.filter.filter_closing(ledger, CLEARED_ON)
        self.assertEqual(removed, {OUT01: Decimal("12")})
        self.assertEqual(ledger.as_dict(), {WAREHOUSE: Decimal("7")})

    def test_earliest_of_duplicate_clearings_wins(self) -> None:
        with self.assertLogs("stock.services.clearing", level="WARNING"):
            duplicate = ClearedOutturnFilter(
                [ClearingEvent("OUT01", CLEARED_ON), ClearingEvent("OUT01", CLEARED_ON - timedelta(days=2))]
            )
        self.assertEqual(duplicate.effective_date("OUT01"), CLEARED_ON - timedelta(days=2))

    def test_outturn_visibility_across_a_replay(self) -> None:
        start = CLEARED_ON - timedelta(days=3)
        end = CLEARED_ON + timedelta(days=3)
        purchase = PaddyPurchase(
            id=1,
            date=start,
            variety="RNR",
            bags=Decimal("40"),
            to_kunchinittu="K1",
            outturn="OUT01",
        )
        engine = PaddyReconciliationEngine(clearings=self.filter)
        days = replay(engine, [purchase], start=start, end=end)
        for snapshot in days:
            with self.subTest(day=snapshot.date):
                self.assertEqual(OUT01 in snapshot.opening, start < snapshot.date <= CLEARED_ON)
                self.assertEqual(OUT01 in snapshot.closing, snapshot.date < CLEARED_ON)
