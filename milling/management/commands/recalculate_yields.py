from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandParser

from milling.models import Outturn
from milling.services.outturns import recalculate_yield


class Command(BaseCommand):
    help = "Recalculates the stored by-product yield percentage of every outturn."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--outturn",
            help="Outturn code to recalculate. All outturns when omitted.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        outturns = Outturn.objects.order_by("code")
        code = options.get("outturn")
        if code:
            outturns = outturns.filter(code=code)
        updated = 0
        for outturn in outturns:
            before = outturn.yield_percentage
            if recalculate_yield(outturn) != before:
                updated += 1
            self.stdout.write(f"{outturn.code}: {outturn.yield_percentage}%")
        self.stdout.write(self.style.SUCCESS(f"Outturns updated: {updated}"))
