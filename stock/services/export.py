"""Presentation of reconciliation results: JSON payloads, flat rows, CSV and
spreadsheet exports."""
from __future__ import annotations

import csv
from decimal import Decimal
from io import BytesIO, StringIO
from typing import Any, Iterable, Sequence

from openpyxl import Workbook

from .driver import ReconciliationResult
from .events import StockKey
from .ledger import TWO_PLACES, StockLedger
from .reconciliation import DailySnapshot, MovementEntry

UNIT_BAGS = "bags"
UNIT_QUINTALS = "quintals"

EXPORT_COLUMNS = (
    "group",
    "date",
    "section",
    "kind",
    "variety",
    "location",
    "kunchinittu",
    "outturn",
    "product_type",
    "packaging",
    "source",
    "destination",
    "quantity",
    "note",
)


def _amount(value: Decimal) -> str:
    return str(value.quantize(TWO_PLACES))


def stock_entry(key: StockKey, quantity: Decimal, unit: str) -> dict[str, str]:
    entry = {
        "key": key.label,
        "variety": key.variety,
        "location": key.location,
        "kunchinittu": key.kunchinittu,
        "outturn": key.outturn,
        unit: _amount(quantity),
    }
    if key.is_rice:
        entry["product_type"] = key.product_type
        entry["packaging"] = key.packaging
    return entry


def ledger_entries(ledger: StockLedger, unit: str) -> list[dict[str, str]]:
    return [stock_entry(key, quantity, unit) for key, quantity in ledger.items()]


def movement_payload(entry: MovementEntry, unit: str) -> dict[str, Any]:
    return {
        "kind": entry.kind,
        "color": entry.color,
        "id": entry.event_id,
        "variety": entry.variety,
        "source": entry.source,
        "destination": entry.destination,
        "outturn": entry.outturn,
        "product_type": entry.product_type,
        unit: _amount(entry.quantity),
        "note": entry.note,
        "clamped": entry.clamped,
        "skipped": entry.skipped,
        "shortfall": _amount(entry.shortfall),
    }


def snapshot_payload(snapshot: DailySnapshot, unit: str) -> dict[str, Any]:
    return {
        "date": snapshot.date.isoformat(),
        "mill_closed": snapshot.mill_closed,
        "consistent": snapshot.consistent,
        "opening_stock": ledger_entries(snapshot.opening, unit),
        "movements": [movement_payload(entry, unit) for entry in snapshot.movements],
        "closing_stock": ledger_entries(snapshot.closing, unit),
        "opening_total": _amount(snapshot.opening_total),
        "closing_total": _amount(snapshot.closing_total),
    }


def result_payload(result: ReconciliationResult, unit: str) -> dict[str, Any]:
    return {
        "generation": result.generation,
        "grouping": result.grouping,
        "kunchinittu": result.kunchinittu,
        "opening_seeded": result.opening_seeded,
        "unit": unit,
        "consistent": result.consistent,
        "groups": [
            {"label": label, "days": [snapshot_payload(day, unit) for day in days]}
            for label, days in result.groups()
        ],
    }


def _stock_rows(group: str, snapshot: DailySnapshot, section: str, ledger: StockLedger) -> list[dict[str, Any]]:
    return [
        {
            "group": group,
            "date": snapshot.date.isoformat(),
            "section": section,
            "kind": "",
            "variety": key.variety,
            "location": key.location,
            "kunchinittu": key.kunchinittu,
            "outturn": key.outturn,
            "product_type": key.product_type,
            "packaging": key.packaging,
            "source": "",
            "destination": "",
            "quantity": quantity.quantize(TWO_PLACES),
            "note": "",
        }
        for key, quantity in ledger.items()
    ]


def flat_rows(result: ReconciliationResult) -> list[dict[str, Any]]:
    """One row per opening balance, movement and closing balance, most recent
    group first, in the same grouping as the on-screen book."""
    rows: list[dict[str, Any]] = []
    for group, days in result.groups():
        for snapshot in days:
            rows.extend(_stock_rows(group, snapshot, "opening", snapshot.opening))
            for entry in snapshot.movements:
                rows.append(
                    {
                        "group": group,
                        "date": snapshot.date.isoformat(),
                        "section": "movement",
                        "kind": entry.kind,
                        "variety": entry.variety,
                        "location": "",
                        "kunchinittu": ",".join(entry.kunchinittus),
                        "outturn": entry.outturn,
                        "product_type": entry.product_type,
                        "packaging": "",
                        "source": entry.source,
                        "destination": entry.destination,
                        "quantity": entry.quantity.quantize(TWO_PLACES),
                        "note": entry.note,
                    }
                )
            rows.extend(_stock_rows(group, snapshot, "closing", snapshot.closing))
    return rows


def rows_to_csv(rows: Iterable[dict[str, Any]], columns: Sequence[str] = EXPORT_COLUMNS) -> str:
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(columns), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def _normalize_export_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (int, float, bool)):
        return value
    return str(value)


def rows_to_xlsx(rows: Iterable[dict[str, Any]], *, title: str, columns: Sequence[str] = EXPORT_COLUMNS) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title[:31]
    sheet.append([column.replace("_", " ").title() for column in columns])
    for row in rows:
        sheet.append([_normalize_export_value(row.get(column)) for column in columns])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
