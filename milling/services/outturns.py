from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from arrivals.models import ApprovalStatus
from milling.models import Outturn, RiceProduction
from stock.services.byproducts import aggregate_by_products
from stock.services.sources import fetch_by_product_entries, outturn_paddy_bags, outturn_paddy_input_quintals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaddyBagsSummary:
    outturn: str
    total_bags: int
    used_bags: int
    available_bags: int
    is_cleared: bool

    def as_dict(self) -> dict[str, object]:
        return {
            "outturn": self.outturn,
            "total_bags": self.total_bags,
            "used_bags": self.used_bags,
            "available_bags": self.available_bags,
            "is_cleared": self.is_cleared,
        }


def used_paddy_bags(outturn: Outturn) -> int:
    total = (
        RiceProduction.objects.filter(outturn=outturn)
        .exclude(status=ApprovalStatus.REJECTED)
        .aggregate(total=Sum("paddy_bags_deducted"))["total"]
    )
    return int(total or 0)


def paddy_bags_summary(outturn: Outturn) -> PaddyBagsSummary:
    total = outturn_paddy_bags(outturn)
    used = used_paddy_bags(outturn)
    available = 0 if outturn.is_cleared else max(total - used, 0)
    return PaddyBagsSummary(
        outturn=outturn.code,
        total_bags=total,
        used_bags=used,
        available_bags=available,
        is_cleared=outturn.is_cleared,
    )


def available_paddy_bags(outturn: Outturn) -> int:
    """Bags shifted or purchased into the outturn that production has not used."""
    return paddy_bags_summary(outturn).available_bags


def clear_outturn(outturn: Outturn, clear_date: date | None, actor=None) -> Outturn:
    """Close an outturn; its remaining paddy leaves the books on ``clear_date``."""
    if clear_date is None:
        raise ValidationError("The clearing date is required.")
    with transaction.atomic():
        outturn = Outturn.objects.select_for_update().get(pk=outturn.pk)
        if outturn.is_cleared:
            raise ValidationError("The outturn is already cleared.")
        remaining = available_paddy_bags(outturn)
        if remaining <= 0:
            raise ValidationError("The outturn has no remaining bags to clear.")
        outturn.is_cleared = True
        outturn.cleared_on = clear_date
        outturn.cleared_at = timezone.now()
        outturn.cleared_by = actor if getattr(actor, "is_authenticated", False) else None
        outturn.remaining_bags = remaining
        outturn.save(
            update_fields=("is_cleared", "cleared_on", "cleared_at", "cleared_by", "remaining_bags", "updated_at")
        )
    logger.info("Outturn %s cleared on %s with %s bags remaining", outturn.code, clear_date, remaining)
    return outturn


def recalculate_yield(outturn: Outturn) -> Decimal:
    """Store the overall by-product yield of ``outturn`` and return it."""
    summary = aggregate_by_products(
        outturn.code,
        fetch_by_product_entries(outturn),
        outturn_paddy_input_quintals(outturn),
    )
    if outturn.yield_percentage != summary.yield_percentage:
        Outturn.objects.filter(pk=outturn.pk).update(yield_percentage=summary.yield_percentage)
        outturn.yield_percentage = summary.yield_percentage
    return summary.yield_percentage
