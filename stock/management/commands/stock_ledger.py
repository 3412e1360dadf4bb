from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from stock.services.books import paddy_stock_book, rice_stock_book
from stock.services.driver import ReconciliationRequest
from stock.services.export import flat_rows, rows_to_csv


class Command(BaseCommand):
    help = "Replays the stock book day by day and prints opening stock, movements and closing stock."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("--book", choices=("paddy", "rice"), default="paddy")
        parser.add_argument("--from", dest="date_from", help="First day (YYYY-MM-DD).")
        parser.add_argument("--to", dest="date_to", help="Last day (YYYY-MM-DD).")
        parser.add_argument("--month", help="Whole month (YYYY-MM); explicit dates take priority.")
        parser.add_argument("--kunchinittu", help="Only show balances and movements of this kunchinittu.")
        parser.add_argument("--grouping", choices=("day", "week"), default="day")
        parser.add_argument("--csv", action="store_true", help="Print flat CSV rows instead of the summary.")

    def handle(self, *args: Any, **options: Any) -> None:
        try:
            stock_request = ReconciliationRequest.from_query(
                {
                    "date_from": options.get("date_from") or "",
                    "date_to": options.get("date_to") or "",
                    "month": options.get("month") or "",
                    "kunchinittu": options.get("kunchinittu") or "",
                    "grouping": options.get("grouping") or "day",
                }
            )
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        book = paddy_stock_book if options["book"] == "paddy" else rice_stock_book
        result = book(stock_request)

        if options.get("csv"):
            self.stdout.write(rows_to_csv(flat_rows(result)), ending="")
            return

        for label, days in result.groups():
            self.stdout.write(self.style.MIGRATE_HEADING(label))
            for day in days:
                status = "mill closed" if day.mill_closed else f"{len(day.movements)} movement(s)"
                line = f"  {day.date:%d/%m/%Y}  opening {day.opening_total:.2f}  closing {day.closing_total:.2f}  {status}"
                if day.consistent:
                    self.stdout.write(line)
                else:
                    self.stdout.write(self.style.WARNING(f"{line}  out of balance"))
        if not result.days:
            self.stdout.write("No movements recorded.")
            return
        self.stdout.write(self.style.SUCCESS(f"Days reconciled: {len(result.days)}"))
