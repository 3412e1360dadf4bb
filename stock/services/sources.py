"""Turns stored records into movement events.

This is the only place the stock services read the database. Rejected
records never reach the books; pending and approved ones do.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db.models import QuerySet, Sum

from arrivals.models import ApprovalStatus, Arrival
from locations.models import Kunchinittu
from milling.models import ByProduct, Outturn, RiceProduction, RiceStockMovement

from .byproducts import ByProductEntry
from .clearing import ClearedOutturnFilter
from .driver import replay
from .events import (
    HUNDRED,
    ZERO,
    ClearingEvent,
    KunchinittuClosure,
    LooseEntry,
    MovementEvent,
    PaddyPurchase,
    Palti,
    ProductionShift,
    RiceProductionEvent,
    RicePurchase,
    RiceSale,
    Shift,
)
from .ledger import StockLedger
from .reconciliation import PaddyReconciliationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpeningBalance:
    before: date
    warehouse: StockLedger
    production: StockLedger

    @property
    def ledger(self) -> StockLedger:
        combined = self.warehouse.copy()
        for key, quantity in self.production.items():
            combined.apply(key, quantity)
        return combined

    def as_dict(self) -> dict[str, object]:
        return {
            "before": self.before.isoformat(),
            "warehouse": _ledger_entries(self.warehouse),
            "production": _ledger_entries(self.production),
        }


def _ledger_entries(ledger: StockLedger) -> list[dict[str, str]]:
    return [
        {
            "key": key.label,
            "variety": key.variety,
            "location": key.location,
            "kunchinittu": key.kunchinittu,
            "outturn": key.outturn,
            "bags": str(quantity.quantize(Decimal("0.01"))),
        }
        for key, quantity in ledger.items()
    ]


def _date_filter(queryset: QuerySet, date_from: date | None, date_to: date | None, field: str = "date") -> QuerySet:
    if date_from:
        queryset = queryset.filter(**{f"{field}__gte": date_from})
    if date_to:
        queryset = queryset.filter(**{f"{field}__lte": date_to})
    return queryset


def _code(kunchinittu: Kunchinittu | None) -> str:
    return kunchinittu.code if kunchinittu else ""


def _name(warehouse) -> str:
    return warehouse.name if warehouse else ""


def arrival_event(arrival: Arrival) -> MovementEvent | None:
    bags = Decimal(arrival.bags or 0)
    kind = arrival.movement_type
    if kind == Arrival.MovementType.PURCHASE:
        return PaddyPurchase(
            id=arrival.sl_no,
            date=arrival.date,
            variety=arrival.variety,
            bags=bags,
            to_kunchinittu=_code(arrival.to_kunchinittu),
            to_warehouse=_name(arrival.to_warehouse),
            outturn=arrival.outturn.code if arrival.outturn else "",
            net_weight=arrival.net_weight,
            broker=arrival.broker,
        )
    if kind == Arrival.MovementType.LOOSE:
        return LooseEntry(
            id=arrival.sl_no,
            date=arrival.date,
            variety=arrival.variety,
            bags=bags,
            to_kunchinittu=_code(arrival.to_kunchinittu),
            to_warehouse=_name(arrival.to_warehouse),
        )
    if kind == Arrival.MovementType.SHIFTING:
        return Shift(
            id=arrival.sl_no,
            date=arrival.date,
            variety=arrival.variety,
            bags=bags,
            from_kunchinittu=_code(arrival.from_kunchinittu),
            from_warehouse=_name(arrival.from_warehouse),
            to_kunchinittu=_code(arrival.to_kunchinittu),
            to_warehouse=_name(arrival.to_warehouse_shift or arrival.to_warehouse),
        )
    if kind == Arrival.MovementType.PRODUCTION_SHIFTING:
        if not arrival.outturn:
            logger.warning("Production shifting %s has no outturn; skipped", arrival.sl_no)
            return None
        return ProductionShift(
            id=arrival.sl_no,
            date=arrival.date,
            variety=arrival.variety,
            bags=bags,
            from_kunchinittu=_code(arrival.from_kunchinittu),
            from_warehouse=_name(arrival.from_warehouse),
            outturn=arrival.outturn.code,
            net_weight=arrival.net_weight,
        )
    logger.warning("Arrival %s has unknown movement type %r; skipped", arrival.sl_no, kind)
    return None


def fetch_movements(date_from: date | None = None, date_to: date | None = None) -> list[MovementEvent]:
    """Paddy arrivals, loose entries and shifts, oldest first."""
    queryset = (
        Arrival.objects.exclude(status=ApprovalStatus.REJECTED)
        .select_related(
            "to_kunchinittu",
            "to_warehouse",
            "from_kunchinittu",
            "from_warehouse",
            "to_warehouse_shift",
            "outturn",
        )
        .order_by("date", "created_at", "pk")
    )
    queryset = _date_filter(queryset, date_from, date_to)
    return [event for event in (arrival_event(arrival) for arrival in queryset) if event is not None]


def rice_production_event(production: RiceProduction) -> RiceProductionEvent:
    packaging = production.packaging
    return RiceProductionEvent(
        id=production.pk,
        date=production.date,
        outturn=production.outturn.code,
        product_type=production.product_type,
        quantity_quintals=production.quantity_quintals,
        variety=production.outturn.allotted_variety,
        bags=Decimal(production.bags or 0),
        packaging=str(packaging) if packaging else "",
        packaging_kg=packaging.allotted_kg if packaging else ZERO,
        location=production.location_code,
        movement=production.movement_type,
        paddy_bags_deducted=Decimal(production.paddy_bags_deducted),
    )


def fetch_rice_productions(
    date_from: date | None = None,
    date_to: date | None = None,
    *,
    outturn: Outturn | None = None,
) -> list[RiceProductionEvent]:
    queryset = (
        RiceProduction.objects.exclude(status=ApprovalStatus.REJECTED)
        .select_related("outturn", "packaging")
        .order_by("date", "created_at", "pk")
    )
    if outturn is not None:
        queryset = queryset.filter(outturn=outturn)
    queryset = _date_filter(queryset, date_from, date_to)
    return [rice_production_event(production) for production in queryset]


def rice_stock_event(movement: RiceStockMovement) -> MovementEvent | None:
    packaging = movement.packaging
    if packaging is None:
        logger.warning("Rice stock movement %s has no packaging; skipped", movement.pk)
        return None
    common = {
        "id": movement.pk,
        "date": movement.date,
        "variety": movement.variety,
        "location": movement.location_code,
        "product_type": movement.product_type,
    }
    if movement.movement_type == RiceStockMovement.MovementType.PALTI:
        target = movement.target_packaging
        if target is None:
            logger.warning("Palti %s has no target packaging; skipped", movement.pk)
            return None
        return Palti(
            source_packaging=str(packaging),
            source_kg=packaging.allotted_kg,
            source_bags=Decimal(movement.bags),
            target_packaging=str(target),
            target_kg=target.allotted_kg,
            target_bags=Decimal(movement.target_bags),
            **common,
        )
    event_class = RiceSale if movement.movement_type == RiceStockMovement.MovementType.SALE else RicePurchase
    return event_class(
        packaging=str(packaging),
        packaging_kg=packaging.allotted_kg,
        bags=Decimal(movement.bags),
        quantity_quintals=movement.quantity_quintals,
        **common,
    )


def fetch_rice_stock_movements(date_from: date | None = None, date_to: date | None = None) -> list[MovementEvent]:
    """Rice purchases, sales and palti, oldest first."""
    queryset = (
        RiceStockMovement.objects.exclude(approval_status=ApprovalStatus.REJECTED)
        .select_related("packaging", "target_packaging")
        .order_by("date", "created_at", "pk")
    )
    queryset = _date_filter(queryset, date_from, date_to)
    return [event for event in (rice_stock_event(movement) for movement in queryset) if event is not None]


def fetch_clearing_events(outturn: str | None = None) -> list[ClearingEvent]:
    queryset = Outturn.objects.filter(is_cleared=True)
    if outturn:
        queryset = queryset.filter(code=outturn)
    events: list[ClearingEvent] = []
    for item in queryset.order_by("code"):
        effective = item.cleared_on or (item.cleared_at.date() if item.cleared_at else None)
        if effective is None:
            logger.warning("Outturn %s is cleared without a clearing date; ignored", item.code)
            continue
        events.append(ClearingEvent(outturn=item.code, effective_date=effective))
    return events


def fetch_kunchinittu_closures(date_from: date | None = None, date_to: date | None = None) -> list[KunchinittuClosure]:
    queryset = Kunchinittu.objects.filter(is_closed=True, closed_on__isnull=False).order_by("closed_on", "code")
    queryset = _date_filter(queryset, date_from, date_to, field="closed_on")
    return [KunchinittuClosure(id=item.code, date=item.closed_on, kunchinittu=item.code) for item in queryset]


def fetch_paddy_events(date_from: date | None = None, date_to: date | None = None) -> list[MovementEvent]:
    events: list[MovementEvent] = []
    events.extend(fetch_movements(date_from, date_to))
    events.extend(fetch_rice_productions(date_from, date_to))
    events.extend(fetch_kunchinittu_closures(date_from, date_to))
    return events


def fetch_rice_events(date_from: date | None = None, date_to: date | None = None) -> list[MovementEvent]:
    events: list[MovementEvent] = []
    events.extend(fetch_rice_productions(date_from, date_to))
    events.extend(fetch_rice_stock_movements(date_from, date_to))
    return events


def fetch_opening_balance(before: date) -> OpeningBalance:
    """Paddy stock at the start of ``before``, from every record dated earlier."""
    clearings = ClearedOutturnFilter(fetch_clearing_events())
    engine = PaddyReconciliationEngine(clearings=clearings)
    events = [event for event in fetch_paddy_events(date_to=before) if event.date < before]
    ledger = StockLedger()
    if events:
        days = replay(engine, events, end=before, opening=None)
        ledger = days[-1].opening if days else ledger
    warehouse, production = ledger.partition()
    return OpeningBalance(before=before, warehouse=warehouse, production=production)


def outturn_paddy_input_quintals(outturn: Outturn) -> Decimal:
    """Net weight (kg) of the paddy shifted or purchased into ``outturn``, in quintals."""
    total = (
        Arrival.objects.filter(
            outturn=outturn,
            movement_type__in=(Arrival.MovementType.PRODUCTION_SHIFTING, Arrival.MovementType.PURCHASE),
        )
        .exclude(status=ApprovalStatus.REJECTED)
        .aggregate(total=Sum("net_weight"))["total"]
    )
    return (total or ZERO) / HUNDRED


def outturn_paddy_bags(outturn: Outturn) -> int:
    total = (
        Arrival.objects.filter(
            outturn=outturn,
            movement_type__in=(Arrival.MovementType.PRODUCTION_SHIFTING, Arrival.MovementType.PURCHASE),
        )
        .exclude(status=ApprovalStatus.REJECTED)
        .aggregate(total=Sum("bags"))["total"]
    )
    return int(total or 0)


def fetch_by_product_entries(outturn: Outturn) -> list[ByProductEntry]:
    return [ByProductEntry.from_record(record) for record in ByProduct.objects.filter(outturn=outturn).order_by("date")]
