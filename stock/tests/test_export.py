from __future__ import annotations

import csv
from datetime import date
from decimal import Decimal
from io import BytesIO, StringIO

from django.test import SimpleTestCase
from openpyxl import load_workbook

from stock.services.driver import GROUP_BY_WEEK, ReconciliationRequest, run
from stock.services.events import PaddyPurchase, Shift
from stock.services.export import (
    EXPORT_COLUMNS,
    UNIT_BAGS,
    flat_rows,
    result_payload,
    rows_to_csv,
    rows_to_xlsx,
)
from stock.services.reconciliation import PaddyReconciliationEngine


def sample_result(**request_kwargs):
    events = [
        PaddyPurchase(id=1, date=date(2024, 1, 1), variety="RNR", bags=Decimal("100"), to_kunchinittu="K1", to_warehouse="WH1"),
        Shift(
            id=2,
            date=date(2024, 1, 2),
            variety="RNR",
            bags=Decimal("25"),
            from_kunchinittu="K1",
            from_warehouse="WH1",
            to_kunchinittu="K2",
            to_warehouse="WH2",
        ),
    ]
    return run(ReconciliationRequest(**request_kwargs), PaddyReconciliationEngine(), events)


class ResultPayloadTests(SimpleTestCase):
    def test_groups_are_most_recent_first(self) -> None:
        payload = result_payload(sample_result(generation="7"), UNIT_BAGS)
        self.assertEqual(payload["generation"], "7")
        self.assertEqual([group["label"] for group in payload["groups"]], ["02/01/2024", "01/01/2024"])
        self.assertTrue(payload["consistent"])

    def test_day_payload_lists_stock_and_movements(self) -> None:
        payload = result_payload(sample_result(), UNIT_BAGS)
        day = payload["groups"][0]["days"][0]
        self.assertEqual(day["date"], "2024-01-02")
        self.assertEqual(day["opening_total"], "100.00")
        self.assertEqual(day["closing_total"], "100.00")
        self.assertEqual(day["movements"][0]["kind"], "shift")
        self.assertEqual(day["movements"][0]["bags"], "25.00")
        self.assertFalse(day["movements"][0]["clamped"])
        self.assertEqual(day["movements"][0]["shortfall"], "0.00")
        self.assertEqual(
            [entry["bags"] for entry in day["closing_stock"]],
            ["75.00", "25.00"],
        )

    def test_week_grouping_collects_both_days(self) -> None:
        payload = result_payload(sample_result(grouping=GROUP_BY_WEEK), UNIT_BAGS)
        self.assertEqual(len(payload["groups"]), 1)
        self.assertEqual(len(payload["groups"][0]["days"]), 2)


class FlatRowsTests(SimpleTestCase):
    def test_sections_per_day(self) -> None:
        rows = flat_rows(sample_result())
        latest = [row for row in rows if row["date"] == "2024-01-02"]
        self.assertEqual([row["section"] for row in latest], ["opening", "movement", "closing", "closing"])
        movement = latest[1]
        self.assertEqual(movement["kunchinittu"], "K1,K2")
        self.assertEqual(movement["quantity"], Decimal("25.00"))

    def test_csv_has_header_and_one_line_per_row(self) -> None:
        rows = flat_rows(sample_result())
        parsed = list(csv.DictReader(StringIO(rows_to_csv(rows))))
        self.assertEqual(len(parsed), len(rows))
        self.assertEqual(list(parsed[0]), list(EXPORT_COLUMNS))
        self.assertEqual(parsed[0]["group"], "02/01/2024")

    def test_xlsx_round_trips_quantities_as_numbers(self) -> None:
        rows = flat_rows(sample_result())
        workbook = load_workbook(BytesIO(rows_to_xlsx(rows, title="Paddy stock")))
        sheet = workbook.active
        self.assertEqual(sheet.title, "Paddy stock")
        self.assertEqual(sheet.max_row, len(rows) + 1)
        quantity_column = EXPORT_COLUMNS.index("quantity") + 1
        self.assertEqual(sheet.cell(row=1, column=quantity_column).value, "Quantity")
        self.assertEqual(sheet.cell(row=2, column=quantity_column).value, 100.0)
