from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from arrivals.models import ApprovalStatus, Arrival
from locations.models import Kunchinittu, Packaging, Warehouse
from milling.models import ByProduct, Outturn, RiceProduction, RiceStockMovement
from stock.services.events import LooseEntry, Palti, PaddyPurchase, ProductionShift, RiceSale, Shift, StockKey
from stock.services.sources import (
    fetch_by_product_entries,
    fetch_clearing_events,
    fetch_kunchinittu_closures,
    fetch_movements,
    fetch_opening_balance,
    fetch_paddy_events,
    fetch_rice_stock_movements,
    outturn_paddy_bags,
    outturn_paddy_input_quintals,
)


class SourceDataMixin:
    @classmethod
    def setUpTestData(cls) -> None:
        cls.main = Warehouse.objects.create(name="Main", code="WH1")
        cls.annex = Warehouse.objects.create(name="Annex", code="WH2")
        cls.k1 = Kunchinittu.objects.create(name="Yard 1", code="K1", warehouse=cls.main)
        cls.k2 = Kunchinittu.objects.create(name="Yard 2", code="K2", warehouse=cls.annex)
        cls.outturn = Outturn.objects.create(code="OUT01", allotted_variety="RNR")

    @classmethod
    def arrival(cls, sl_no: str, day: date, movement_type: str, bags: int, **kwargs) -> Arrival:
        kwargs.setdefault("variety", "RNR")
        kwargs.setdefault("status", ApprovalStatus.APPROVED)
        return Arrival.objects.create(sl_no=sl_no, date=day, movement_type=movement_type, bags=bags, **kwargs)


class FetchMovementsTests(SourceDataMixin, TestCase):
    def test_rejected_records_are_excluded(self) -> None:
        self.arrival("A1", date(2024, 1, 1), Arrival.MovementType.PURCHASE, 100, to_kunchinittu=self.k1, to_warehouse=self.main)
        self.arrival(
            "A2",
            date(2024, 1, 1),
            Arrival.MovementType.PURCHASE,
            50,
            to_kunchinittu=self.k1,
            to_warehouse=self.main,
            status=ApprovalStatus.REJECTED,
        )
        self.arrival(
            "A3",
            date(2024, 1, 2),
            Arrival.MovementType.LOOSE,
            3,
            to_kunchinittu=self.k1,
            to_warehouse=self.main,
            status=ApprovalStatus.PENDING,
        )

        events = fetch_movements()
        self.assertEqual([event.id for event in events], ["A1", "A3"])
        self.assertIsInstance(events[0], PaddyPurchase)
        self.assertIsInstance(events[1], LooseEntry)

    def test_shift_prefers_the_shifting_warehouse(self) -> None:
        self.arrival(
            "S1",
            date(2024, 1, 2),
            Arrival.MovementType.SHIFTING,
            20,
            from_kunchinittu=self.k1,
            from_warehouse=self.main,
            to_kunchinittu=self.k2,
            to_warehouse=self.main,
            to_warehouse_shift=self.annex,
        )
        (event,) = fetch_movements()
        self.assertIsInstance(event, Shift)
        self.assertEqual(event.from_kunchinittu, "K1")
        self.assertEqual(event.to_kunchinittu, "K2")
        self.assertEqual(event.to_warehouse, "Annex")

    def test_production_shifting_names_its_outturn(self) -> None:
        self.arrival(
            "P1",
            date(2024, 1, 2),
            Arrival.MovementType.PRODUCTION_SHIFTING,
            40,
            from_kunchinittu=self.k1,
            from_warehouse=self.main,
            outturn=self.outturn,
            net_weight=Decimal("2000"),
        )
        (event,) = fetch_movements()
        self.assertIsInstance(event, ProductionShift)
        self.assertEqual(event.outturn, "OUT01")
        self.assertEqual(event.bags, Decimal("40"))

    def test_date_range_is_inclusive(self) -> None:
        for index, day in enumerate((1, 2, 3), start=1):
            self.arrival(f"A{index}", date(2024, 1, day), Arrival.MovementType.PURCHASE, 10, to_kunchinittu=self.k1, to_warehouse=self.main)
        events = fetch_movements(date(2024, 1, 2), date(2024, 1, 3))
        self.assertEqual([event.id for event in events], ["A2", "A3"])


class PaddyEventsTests(SourceDataMixin, TestCase):
    def test_productions_and_closures_join_the_paddy_events(self) -> None:
        self.arrival("A1", date(2024, 1, 1), Arrival.MovementType.PURCHASE, 100, to_kunchinittu=self.k1, to_warehouse=self.main)
        RiceProduction.objects.create(
            outturn=self.outturn,
            date=date(2024, 1, 3),
            product_type="Rice",
            quantity_quintals=Decimal("18.80"),
            location_code="A1",
            status=ApprovalStatus.APPROVED,
        )
        RiceProduction.objects.create(
            outturn=self.outturn,
            date=date(2024, 1, 3),
            product_type="Rice",
            quantity_quintals=Decimal("4.70"),
            location_code="A1",
            status=ApprovalStatus.REJECTED,
        )
        Kunchinittu.objects.filter(pk=self.k2.pk).update(is_closed=True, closed_on=date(2024, 1, 4))

        events = fetch_paddy_events()
        self.assertEqual(len(events), 3)
        production = events[1]
        self.assertEqual(production.variety, "RNR")
        self.assertEqual(production.paddy_bags_deducted, Decimal("40"))
        self.assertEqual(events[2].kunchinittu, "K2")

    def test_closures_outside_the_range_are_ignored(self) -> None:
        Kunchinittu.objects.filter(pk=self.k1.pk).update(is_closed=True, closed_on=date(2024, 2, 1))
        self.assertEqual(fetch_kunchinittu_closures(date(2024, 1, 1), date(2024, 1, 31)), [])
        self.assertEqual(len(fetch_kunchinittu_closures(date(2024, 1, 1), date(2024, 2, 1))), 1)


class ClearingEventsTests(SourceDataMixin, TestCase):
    def test_only_cleared_outturns_with_a_date(self) -> None:
        Outturn.objects.create(code="OUT02", allotted_variety="BPT", is_cleared=True, cleared_on=date(2024, 1, 10))
        Outturn.objects.create(code="OUT03", allotted_variety="BPT", is_cleared=True)
        with self.assertLogs("stock.services.sources", level="WARNING"):
            events = fetch_clearing_events()
        self.assertEqual([(event.outturn, event.effective_date) for event in events], [("OUT02", date(2024, 1, 10))])


class OpeningBalanceTests(SourceDataMixin, TestCase):
    def test_opening_balance_splits_warehouse_and_production(self) -> None:
        self.arrival("A1", date(2024, 1, 1), Arrival.MovementType.PURCHASE, 100, to_kunchinittu=self.k1, to_warehouse=self.main)
        self.arrival(
            "P1",
            date(2024, 1, 2),
            Arrival.MovementType.PRODUCTION_SHIFTING,
            40,
            from_kunchinittu=self.k1,
            from_warehouse=self.main,
            outturn=self.outturn,
        )
        self.arrival("A2", date(2024, 1, 3), Arrival.MovementType.PURCHASE, 7, to_kunchinittu=self.k1, to_warehouse=self.main)

        balance = fetch_opening_balance(date(2024, 1, 3))
        self.assertEqual(balance.warehouse.as_dict(), {StockKey.warehouse("RNR", "K1", "Main"): Decimal("60")})
        self.assertEqual(balance.production.as_dict(), {StockKey.production("RNR", "K1", "OUT01"): Decimal("40")})
        self.assertEqual(balance.ledger.total(), Decimal("100"))
        self.assertEqual(balance.as_dict()["warehouse"][0]["bags"], "60.00")

    def test_no_history_gives_an_empty_balance(self) -> None:
        balance = fetch_opening_balance(date(2024, 1, 3))
        self.assertEqual(len(balance.ledger), 0)


class RiceStockMovementTests(SourceDataMixin, TestCase):
    def test_sales_and_palti_are_converted(self) -> None:
        gold = Packaging.objects.create(brand_name="Gold", code="G26", allotted_kg=Decimal("26"))
        silver = Packaging.objects.create(brand_name="Silver", code="S25", allotted_kg=Decimal("25"))
        RiceStockMovement.objects.create(
            date=date(2024, 4, 1),
            movement_type=RiceStockMovement.MovementType.SALE,
            variety="RNR",
            location_code="A1",
            packaging=gold,
            bags=10,
        )
        RiceStockMovement.objects.create(
            date=date(2024, 4, 2),
            movement_type=RiceStockMovement.MovementType.PALTI,
            variety="RNR",
            location_code="A1",
            packaging=gold,
            bags=20,
            target_packaging=silver,
            target_bags=20,
        )
        RiceStockMovement.objects.create(
            date=date(2024, 4, 2),
            movement_type=RiceStockMovement.MovementType.SALE,
            variety="RNR",
            location_code="A1",
            packaging=gold,
            bags=5,
            approval_status=ApprovalStatus.REJECTED,
        )

        sale, palti = fetch_rice_stock_movements()
        self.assertIsInstance(sale, RiceSale)
        self.assertEqual(sale.quintals, Decimal("2.60"))
        self.assertEqual(sale.packaging, "Gold 26kg")
        self.assertIsInstance(palti, Palti)
        self.assertEqual(palti.shortage_kg, Decimal("20"))


class OutturnInputTests(SourceDataMixin, TestCase):
    def test_paddy_input_counts_shifted_and_purchased_paddy(self) -> None:
        self.arrival(
            "P1",
            date(2024, 1, 2),
            Arrival.MovementType.PRODUCTION_SHIFTING,
            40,
            from_kunchinittu=self.k1,
            outturn=self.outturn,
            net_weight=Decimal("2000"),
        )
        self.arrival("A1", date(2024, 1, 2), Arrival.MovementType.PURCHASE, 20, outturn=self.outturn, net_weight=Decimal("1000"))
        self.arrival(
            "A2",
            date(2024, 1, 2),
            Arrival.MovementType.PURCHASE,
            20,
            outturn=self.outturn,
            net_weight=Decimal("1000"),
            status=ApprovalStatus.REJECTED,
        )
        self.assertEqual(outturn_paddy_input_quintals(self.outturn), Decimal("30"))
        self.assertEqual(outturn_paddy_bags(self.outturn), 60)

    def test_by_product_entries_in_date_order(self) -> None:
        ByProduct.objects.create(outturn=self.outturn, date=date(2024, 1, 4), rice=Decimal("8"))
        ByProduct.objects.create(outturn=self.outturn, date=date(2024, 1, 3), rice=Decimal("10"))
        entries = fetch_by_product_entries(self.outturn)
        self.assertEqual([entry.date for entry in entries], [date(2024, 1, 3), date(2024, 1, 4)])
        self.assertEqual(entries[0].quantities["rice"], Decimal("10"))
