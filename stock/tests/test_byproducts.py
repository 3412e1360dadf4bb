from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from stock.services.byproducts import BY_PRODUCT_FIELDS, ByProductEntry, aggregate_by_products, yield_percentage


def entry(day, **quantities):
    return ByProductEntry(date=day, quantities={name: Decimal(value) for name, value in quantities.items()})


class YieldPercentageTests(SimpleTestCase):
    def test_rounds_half_up_to_two_places(self) -> None:
        self.assertEqual(yield_percentage(Decimal("1"), Decimal("3")), Decimal("33.33"))
        self.assertEqual(yield_percentage(Decimal("2"), Decimal("3")), Decimal("66.67"))

    def test_zero_input_gives_zero_yield(self) -> None:
        self.assertEqual(yield_percentage(Decimal("10"), Decimal("0")), Decimal("0.00"))


class AggregateByProductsTests(SimpleTestCase):
    def test_totals_and_yields_per_product(self) -> None:
        entries = [
            entry(date(2024, 1, 3), rice="10", broken="1.5", bran="2"),
            entry(date(2024, 1, 4), rice="8", sizer_broken="0.5"),
        ]
        result = aggregate_by_products("OUT01", entries, Decimal("40"))
        products = {product.field: product for product in result.products}

        self.assertEqual(len(result.products), len(BY_PRODUCT_FIELDS))
        self.assertEqual(products["rice"].quintals, Decimal("18.00"))
        self.assertEqual(products["rice"].yield_percentage, Decimal("45.00"))
        self.assertEqual(products["sizer_broken"].quintals, Decimal("0.50"))
        self.assertEqual(products["faram"].quintals, Decimal("0.00"))
        self.assertEqual(result.total_quintals, Decimal("22.00"))
        self.assertEqual(result.yield_percentage, Decimal("55.00"))
        self.assertEqual(result.entry_count, 2)

    def test_no_entries_and_no_input(self) -> None:
        result = aggregate_by_products("OUT02", [], 0)
        self.assertEqual(result.total_quintals, Decimal("0.00"))
        self.assertEqual(result.yield_percentage, Decimal("0.00"))
        self.assertEqual(result.as_dict()["entries"], 0)

    def test_entry_from_record_reads_every_product(self) -> None:
        record = SimpleNamespace(date=date(2024, 1, 3), rice=Decimal("4"), bran=None)
        built = ByProductEntry.from_record(record)
        self.assertEqual(built.quantities["rice"], Decimal("4"))
        self.assertEqual(built.quantities["bran"], Decimal("0"))
        self.assertEqual(set(built.quantities), {name for name, _ in BY_PRODUCT_FIELDS})

    def test_payload_uses_strings_for_amounts(self) -> None:
        payload = aggregate_by_products("OUT01", [entry(date(2024, 1, 3), rice="10")], Decimal("20")).as_dict()
        self.assertEqual(payload["outturn"], "OUT01")
        self.assertEqual(payload["paddy_input_quintals"], "20.00")
        self.assertEqual(payload["products"][0], {
            "field": "rice",
            "label": "Rice",
            "quintals": "10.00",
            "yield_percentage": "50.00",
        })
