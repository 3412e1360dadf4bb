from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from stock.services.driver import (
    GROUP_BY_WEEK,
    ReconciliationRequest,
    calendar_days,
    group_label,
    replay,
    run,
)
from stock.services.events import PaddyPurchase, ProductionShift, RiceProductionEvent, Shift, StockKey
from stock.services.ledger import StockLedger
from stock.services.reconciliation import PaddyReconciliationEngine

RNR_K1 = StockKey.warehouse("RNR", "K1", "WH1")
RNR_K2 = StockKey.warehouse("RNR", "K2", "WH2")
RNR_OUT01 = StockKey.production("RNR", "K1", "OUT01")


def sample_events():
    return [
        PaddyPurchase(id=1, date=date(2024, 1, 1), variety="RNR", bags=Decimal("100"), to_kunchinittu="K1", to_warehouse="WH1"),
        ProductionShift(
            id=2,
            date=date(2024, 1, 2),
            variety="RNR",
            bags=Decimal("40"),
            from_kunchinittu="K1",
            from_warehouse="WH1",
            outturn="OUT01",
        ),
        RiceProductionEvent(
            id=3,
            date=date(2024, 1, 3),
            outturn="OUT01",
            product_type="Rice",
            quantity_quintals=Decimal("18.8"),
        ),
        Shift(
            id=4,
            date=date(2024, 1, 6),
            variety="RNR",
            bags=Decimal("10"),
            from_kunchinittu="K1",
            from_warehouse="WH1",
            to_kunchinittu="K2",
            to_warehouse="WH2",
        ),
    ]


class ReplayTests(SimpleTestCase):
    def setUp(self) -> None:
        self.engine = PaddyReconciliationEngine()

    def test_every_calendar_day_is_rendered(self) -> None:
        days = replay(self.engine, sample_events())
        self.assertEqual([day.date for day in days], calendar_days(date(2024, 1, 1), date(2024, 1, 6)))

    def test_zero_activity_days_carry_stock_unchanged(self) -> None:
        days = replay(self.engine, sample_events())
        quiet = [day for day in days if day.date in (date(2024, 1, 4), date(2024, 1, 5))]
        self.assertEqual(len(quiet), 2)
        for day in quiet:
            self.assertTrue(day.mill_closed)
            self.assertEqual(day.opening, day.closing)
            self.assertEqual(day.movements, [])

    def test_closing_carries_into_next_opening(self) -> None:
        days = replay(self.engine, sample_events())
        for previous, current in zip(days, days[1:]):
            self.assertEqual(current.opening, previous.closing)

    def test_replay_is_idempotent(self) -> None:
        first = replay(self.engine, sample_events())
        second = replay(PaddyReconciliationEngine(), sample_events())
        self.assertEqual(
            [(day.date, day.opening, day.closing, day.deltas) for day in first],
            [(day.date, day.opening, day.closing, day.deltas) for day in second],
        )

    def test_final_balances(self) -> None:
        days = replay(self.engine, sample_events())
        self.assertEqual(days[-1].closing.as_dict(), {RNR_K1: Decimal("50"), RNR_K2: Decimal("10")})

    def test_balances_never_go_negative_under_over_debits(self) -> None:
        events = [
            Shift(
                id=index,
                date=date(2024, 2, 1 + index % 3),
                variety="RNR",
                bags=Decimal("70"),
                from_kunchinittu="K1",
                from_warehouse="WH1",
                to_kunchinittu="K2",
                to_warehouse="WH2",
            )
            for index in range(6)
        ]
        events.append(PaddyPurchase(id=99, date=date(2024, 2, 1), variety="RNR", bags=Decimal("100"), to_kunchinittu="K1", to_warehouse="WH1"))
        with self.assertLogs("stock.services", level="WARNING"):
            days = replay(self.engine, events)
        for day in days:
            for ledger in (day.opening, day.closing):
                for _, quantity in ledger.items():
                    self.assertGreaterEqual(quantity, 0)
        # The second shift of the first day clamps: 30 bags leave K1 without reaching K2.
        self.assertEqual(days[-1].closing.total(), Decimal("70"))

    def test_range_folds_earlier_events_into_opening(self) -> None:
        days = replay(self.engine, sample_events(), start=date(2024, 1, 3), end=date(2024, 1, 4))
        self.assertEqual([day.date for day in days], [date(2024, 1, 3), date(2024, 1, 4)])
        self.assertEqual(days[0].opening.as_dict(), {RNR_K1: Decimal("60"), RNR_OUT01: Decimal("40")})

    def test_seeded_opening_ignores_earlier_events(self) -> None:
        seed = StockLedger({RNR_K1: Decimal("15")})
        days = replay(self.engine, sample_events(), start=date(2024, 1, 5), end=date(2024, 1, 6), opening=seed)
        self.assertEqual(days[0].opening.as_dict(), {RNR_K1: Decimal("15")})
        self.assertEqual(days[-1].closing.as_dict(), {RNR_K1: Decimal("5"), RNR_K2: Decimal("10")})

    def test_range_past_the_last_event_renders_empty_days(self) -> None:
        days = replay(self.engine, sample_events(), start=date(2024, 1, 6), end=date(2024, 1, 8))
        self.assertEqual(len(days), 3)
        self.assertTrue(days[-1].mill_closed)

    def test_no_events_and_open_range_renders_nothing(self) -> None:
        self.assertEqual(replay(self.engine, []), [])


class ReconciliationRequestTests(SimpleTestCase):
    def test_month_resolves_to_its_bounds(self) -> None:
        request = ReconciliationRequest.from_query({"month": "2024-02"})
        self.assertEqual(request.resolved_range(), (date(2024, 2, 1), date(2024, 2, 29)))

    def test_explicit_dates_win_over_month(self) -> None:
        request = ReconciliationRequest.from_query({"month": "2024-02", "date_from": "2024-02-10"})
        self.assertEqual(request.resolved_range(), (date(2024, 2, 10), date(2024, 2, 29)))

    def test_invalid_values_raise(self) -> None:
        for params in (
            {"date_from": "yesterday"},
            {"month": "2024-13"},
            {"grouping": "year"},
            {"date_from": "2024-02-10", "date_to": "2024-02-01"},
        ):
            with self.subTest(params=params):
                with self.assertRaises(ValueError):
                    ReconciliationRequest.from_query(params)

    def test_generation_is_echoed(self) -> None:
        request = ReconciliationRequest.from_query({"generation": "42"})
        result = run(request, PaddyReconciliationEngine(), sample_events())
        self.assertEqual(result.generation, "42")


class ReconciliationResultTests(SimpleTestCase):
    def test_days_desc_is_most_recent_first(self) -> None:
        result = run(ReconciliationRequest(), PaddyReconciliationEngine(), sample_events())
        self.assertEqual(result.days_desc[0].date, date(2024, 1, 6))
        self.assertEqual(result.days[0].date, date(2024, 1, 1))

    def test_week_grouping(self) -> None:
        result = run(ReconciliationRequest(grouping=GROUP_BY_WEEK), PaddyReconciliationEngine(), sample_events())
        groups = result.groups()
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0][0], group_label(date(2024, 1, 3), GROUP_BY_WEEK))
        self.assertEqual(groups[0][0], "01/01/2024 - 07/01/2024")

    def test_kunchinittu_filter_only_restricts_display(self) -> None:
        result = run(ReconciliationRequest(kunchinittu="K2"), PaddyReconciliationEngine(), sample_events())
        last = result.days[-1]
        self.assertEqual(last.closing.as_dict(), {RNR_K2: Decimal("10")})
        self.assertEqual(len(last.movements), 1)
        self.assertEqual(result.days[0].closing.as_dict(), {})
