"""Stock-affecting movement events and their normalization into postings.

Every record the mill stores (arrivals, rice productions, rice stock
movements, outturn clearings, kunchinittu closures) is turned into one of
the frozen event types below. ``paddy_postings`` and ``rice_postings`` then
translate an event into a :class:`PostingGroup`: an ordered list of signed
deltas against :class:`StockKey` balances. The replay engines never look at
event fields again; they only add signed deltas.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import ClassVar, Union

from django.conf import settings
from django.db import models

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")
DEFAULT_PADDY_QUINTAL_FACTOR = Decimal("0.47")
DEFAULT_NO_DEDUCTION_PRODUCTS = ("Bran", "Farm Bran", "Faram")


class MovementKind(models.TextChoices):
    PURCHASE = "purchase", "Purchase"
    PRODUCTION_PURCHASE = "production-purchase", "Purchase for production"
    LOOSE = "loose", "Loose entry"
    SHIFT = "shift", "Shifting"
    PRODUCTION_SHIFT = "production-shift", "Production shifting"
    RICE_PRODUCTION = "rice-production", "Rice production"
    RICE_PURCHASE = "rice-purchase", "Rice purchase"
    SALE = "sale", "Sale"
    PALTI = "palti", "Palti"
    CLEARING = "clearing", "Outturn clearing"
    CLOSURE = "kunchinittu-closure", "Kunchinittu closure"


MOVEMENT_COLORS = {
    MovementKind.PURCHASE: "green",
    MovementKind.PRODUCTION_PURCHASE: "teal",
    MovementKind.LOOSE: "green",
    MovementKind.SHIFT: "blue",
    MovementKind.PRODUCTION_SHIFT: "orange",
    MovementKind.RICE_PRODUCTION: "red",
    MovementKind.RICE_PURCHASE: "green",
    MovementKind.SALE: "purple",
    MovementKind.PALTI: "amber",
    MovementKind.CLEARING: "darkred",
    MovementKind.CLOSURE: "grey",
}


def to_decimal(value: object) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        logger.warning("Unreadable quantity %r treated as zero", value)
        return ZERO


def location_label(kunchinittu: str, warehouse: str) -> str:
    parts = [part for part in (kunchinittu.strip(), warehouse.strip()) if part]
    return " - ".join(parts)


def paddy_bags_deducted(quintals: object, product_type: str) -> int:
    """Paddy bags consumed by producing ``quintals`` of ``product_type``.

    Bran-type products consume nothing; everything else consumes
    ``quintals / 0.47`` bags, rounded half up.
    """
    no_deduction = getattr(settings, "STOCK_NO_DEDUCTION_PRODUCTS", DEFAULT_NO_DEDUCTION_PRODUCTS)
    if product_type in no_deduction:
        return 0
    factor = getattr(settings, "STOCK_PADDY_QUINTAL_FACTOR", DEFAULT_PADDY_QUINTAL_FACTOR)
    bags = to_decimal(quintals) / to_decimal(factor)
    return int(bags.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True, order=True)
class StockKey:
    """Identity of one stock balance.

    Warehouse paddy uses ``variety`` and ``location``; paddy held against an
    outturn uses ``variety``, ``kunchinittu`` and ``outturn``; rice stock uses
    ``variety``, ``location``, ``product_type`` and ``packaging``.
    """

    variety: str
    location: str = ""
    kunchinittu: str = ""
    outturn: str = ""
    product_type: str = ""
    packaging: str = ""

    @classmethod
    def warehouse(cls, variety: str, kunchinittu: str, warehouse: str) -> "StockKey":
        return cls(
            variety=variety,
            location=location_label(kunchinittu, warehouse),
            kunchinittu=kunchinittu,
        )

    @classmethod
    def production(cls, variety: str, kunchinittu: str, outturn: str) -> "StockKey":
        return cls(variety=variety, kunchinittu=kunchinittu, outturn=outturn)

    @classmethod
    def rice(cls, variety: str, location: str, product_type: str, packaging: str) -> "StockKey":
        return cls(
            variety=variety,
            location=location,
            product_type=product_type,
            packaging=packaging,
        )

    @property
    def is_production(self) -> bool:
        return bool(self.outturn)

    @property
    def is_rice(self) -> bool:
        return bool(self.product_type)

    @property
    def label(self) -> str:
        if self.is_production:
            parts = (self.variety, self.kunchinittu, self.outturn)
        elif self.is_rice:
            parts = (self.variety, self.location, self.product_type, self.packaging)
        else:
            parts = (self.variety, self.location)
        return "|".join(parts)

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True)
class PaddyPurchase:
    kind: ClassVar[str] = MovementKind.PURCHASE

    id: object
    date: date
    variety: str
    bags: Decimal
    to_kunchinittu: str = ""
    to_warehouse: str = ""
    outturn: str = ""
    net_weight: Decimal = ZERO
    broker: str = ""


@dataclass(frozen=True, slots=True)
class LooseEntry:
    kind: ClassVar[str] = MovementKind.LOOSE

    id: object
    date: date
    variety: str
    bags: Decimal
    to_kunchinittu: str = ""
    to_warehouse: str = ""


@dataclass(frozen=True, slots=True)
class Shift:
    kind: ClassVar[str] = MovementKind.SHIFT

    id: object
    date: date
    variety: str
    bags: Decimal
    from_kunchinittu: str
    from_warehouse: str
    to_kunchinittu: str
    to_warehouse: str


@dataclass(frozen=True, slots=True)
class ProductionShift:
    kind: ClassVar[str] = MovementKind.PRODUCTION_SHIFT

    id: object
    date: date
    variety: str
    bags: Decimal
    from_kunchinittu: str
    from_warehouse: str
    outturn: str
    net_weight: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class RiceProductionEvent:
    kind: ClassVar[str] = MovementKind.RICE_PRODUCTION
    LOADING: ClassVar[str] = "loading"

    id: object
    date: date
    outturn: str
    product_type: str
    quantity_quintals: Decimal
    variety: str = ""
    bags: Decimal = ZERO
    packaging: str = ""
    packaging_kg: Decimal = ZERO
    location: str = ""
    movement: str = "kunchinittu"
    paddy_bags_deducted: Decimal | None = None

    @property
    def is_loading(self) -> bool:
        return self.movement == self.LOADING

    @property
    def deduction(self) -> Decimal:
        if self.paddy_bags_deducted is not None:
            return to_decimal(self.paddy_bags_deducted)
        return Decimal(paddy_bags_deducted(self.quantity_quintals, self.product_type))


@dataclass(frozen=True, slots=True)
class RicePurchase:
    kind: ClassVar[str] = MovementKind.RICE_PURCHASE

    id: object
    date: date
    variety: str
    location: str
    product_type: str
    packaging: str
    packaging_kg: Decimal
    bags: Decimal
    quantity_quintals: Decimal = ZERO

    @property
    def quintals(self) -> Decimal:
        if self.quantity_quintals:
            return self.quantity_quintals
        return self.bags * self.packaging_kg / HUNDRED


@dataclass(frozen=True, slots=True)
class RiceSale:
    kind: ClassVar[str] = MovementKind.SALE

    id: object
    date: date
    variety: str
    location: str
    product_type: str
    packaging: str
    packaging_kg: Decimal
    bags: Decimal
    quantity_quintals: Decimal = ZERO

    @property
    def quintals(self) -> Decimal:
        if self.quantity_quintals:
            return self.quantity_quintals
        return self.bags * self.packaging_kg / HUNDRED


@dataclass(frozen=True, slots=True)
class Palti:
    """Repackaging of rice stock from one packaging into another."""

    kind: ClassVar[str] = MovementKind.PALTI

    id: object
    date: date
    variety: str
    location: str
    product_type: str
    source_packaging: str
    source_kg: Decimal
    source_bags: Decimal
    target_packaging: str
    target_kg: Decimal
    target_bags: Decimal

    @property
    def source_quintals(self) -> Decimal:
        return self.source_bags * self.source_kg / HUNDRED

    @property
    def target_quintals(self) -> Decimal:
        return self.target_bags * self.target_kg / HUNDRED

    @property
    def shortage_kg(self) -> Decimal:
        return max((self.source_quintals - self.target_quintals) * HUNDRED, ZERO)


@dataclass(frozen=True, slots=True)
class KunchinittuClosure:
    kind: ClassVar[str] = MovementKind.CLOSURE

    id: object
    date: date
    kunchinittu: str


@dataclass(frozen=True, slots=True)
class ClearingEvent:
    """An outturn closed administratively; its leftover paddy is written off."""

    kind: ClassVar[str] = MovementKind.CLEARING

    outturn: str
    effective_date: date

    @property
    def id(self) -> str:
        return self.outturn

    @property
    def date(self) -> date:
        return self.effective_date


MovementEvent = Union[
    PaddyPurchase,
    LooseEntry,
    Shift,
    ProductionShift,
    RiceProductionEvent,
    RicePurchase,
    RiceSale,
    Palti,
    KunchinittuClosure,
    ClearingEvent,
]


@dataclass(frozen=True, slots=True)
class Posting:
    """A signed delta against one balance.

    ``key`` names the balance directly. Deductions that can only be resolved
    against the ledger at replay time name an ``outturn`` (spread over every
    balance held against it) or a ``kunchinittu`` (write off all of its
    warehouse balances, ``delta`` is ignored).
    """

    delta: Decimal
    key: StockKey | None = None
    outturn: str = ""
    kunchinittu: str = ""

    @property
    def is_debit(self) -> bool:
        return self.delta < 0 or bool(self.kunchinittu)


@dataclass(frozen=True, slots=True)
class PostingGroup:
    """Postings of one event, applied in order.

    A debit that clamps stops the group: the remaining postings (the
    dependent credits) are not applied. ``net_effect`` is the change the
    event should make to the ledger total, ``None`` when only the replay can
    tell (write-offs).
    """

    kind: str
    event: object
    postings: tuple[Posting, ...]
    quantity: Decimal
    net_effect: Decimal | None
    variety: str = ""
    source: str = ""
    destination: str = ""
    outturn: str = ""
    product_type: str = ""
    note: str = ""
    kunchinittus: tuple[str, ...] = field(default=())

    @property
    def color(self) -> str:
        return MOVEMENT_COLORS.get(self.kind, "slate")


def _variety(value: str) -> str:
    return (value or "").strip() or "Unknown"


def _paddy_purchase_postings(event: PaddyPurchase) -> PostingGroup:
    variety = _variety(event.variety)
    bags = to_decimal(event.bags)
    has_warehouse = bool(event.to_kunchinittu or event.to_warehouse)
    if event.outturn:
        if has_warehouse and event.to_warehouse:
            logger.warning(
                "Purchase %s names outturn %s and warehouse %s; routing it to the outturn",
                event.id,
                event.outturn,
                location_label(event.to_kunchinittu, event.to_warehouse),
            )
        key = StockKey.production(variety, event.to_kunchinittu, event.outturn)
        return PostingGroup(
            kind=MovementKind.PRODUCTION_PURCHASE,
            event=event,
            postings=(Posting(delta=bags, key=key),),
            quantity=bags,
            net_effect=bags,
            variety=variety,
            source=event.broker,
            destination=event.outturn,
            outturn=event.outturn,
            kunchinittus=(event.to_kunchinittu,),
        )
    if not has_warehouse:
        logger.warning("Purchase %s has no destination; crediting an unknown location", event.id)
    key = StockKey.warehouse(variety, event.to_kunchinittu, event.to_warehouse)
    return PostingGroup(
        kind=MovementKind.PURCHASE,
        event=event,
        postings=(Posting(delta=bags, key=key),),
        quantity=bags,
        net_effect=bags,
        variety=variety,
        source=event.broker,
        destination=key.location,
        kunchinittus=(event.to_kunchinittu,) if event.to_kunchinittu else (),
    )


def paddy_postings(event: MovementEvent) -> PostingGroup | None:
    """Postings of ``event`` against the paddy book, ``None`` if it has none."""
    if isinstance(event, PaddyPurchase):
        return _paddy_purchase_postings(event)
    if isinstance(event, LooseEntry):
        variety = _variety(event.variety)
        bags = to_decimal(event.bags)
        key = StockKey.warehouse(variety, event.to_kunchinittu, event.to_warehouse)
        return PostingGroup(
            kind=MovementKind.LOOSE,
            event=event,
            postings=(Posting(delta=bags, key=key),),
            quantity=bags,
            net_effect=bags,
            variety=variety,
            destination=key.location,
            kunchinittus=(event.to_kunchinittu,),
        )
    if isinstance(event, Shift):
        variety = _variety(event.variety)
        bags = to_decimal(event.bags)
        source = StockKey.warehouse(variety, event.from_kunchinittu, event.from_warehouse)
        destination = StockKey.warehouse(variety, event.to_kunchinittu, event.to_warehouse)
        return PostingGroup(
            kind=MovementKind.SHIFT,
            event=event,
            postings=(Posting(delta=-bags, key=source), Posting(delta=bags, key=destination)),
            quantity=bags,
            net_effect=ZERO,
            variety=variety,
            source=source.location,
            destination=destination.location,
            kunchinittus=(event.from_kunchinittu, event.to_kunchinittu),
        )
    if isinstance(event, ProductionShift):
        variety = _variety(event.variety)
        bags = to_decimal(event.bags)
        source = StockKey.warehouse(variety, event.from_kunchinittu, event.from_warehouse)
        destination = StockKey.production(variety, event.from_kunchinittu, event.outturn)
        return PostingGroup(
            kind=MovementKind.PRODUCTION_SHIFT,
            event=event,
            postings=(Posting(delta=-bags, key=source), Posting(delta=bags, key=destination)),
            quantity=bags,
            net_effect=ZERO,
            variety=variety,
            source=source.location,
            destination=event.outturn,
            outturn=event.outturn,
            kunchinittus=(event.from_kunchinittu,),
        )
    if isinstance(event, RiceProductionEvent):
        if event.is_loading:
            return None
        bags = event.deduction
        if bags <= 0:
            return None
        return PostingGroup(
            kind=MovementKind.RICE_PRODUCTION,
            event=event,
            postings=(Posting(delta=-bags, outturn=event.outturn),),
            quantity=bags,
            net_effect=-bags,
            variety=event.variety,
            source=event.outturn,
            destination=event.product_type,
            outturn=event.outturn,
            product_type=event.product_type,
            note=f"{to_decimal(event.quantity_quintals):f} qtl",
        )
    if isinstance(event, KunchinittuClosure):
        return PostingGroup(
            kind=MovementKind.CLOSURE,
            event=event,
            postings=(Posting(delta=ZERO, kunchinittu=event.kunchinittu),),
            quantity=ZERO,
            net_effect=None,
            source=event.kunchinittu,
            kunchinittus=(event.kunchinittu,),
        )
    if isinstance(event, (RicePurchase, RiceSale, Palti, ClearingEvent)):
        return None
    raise TypeError(f"Unsupported movement event: {event!r}")


def rice_postings(event: MovementEvent) -> PostingGroup | None:
    """Postings of ``event`` against the rice stock book, ``None`` if it has none."""
    if isinstance(event, RiceProductionEvent):
        if event.is_loading:
            return None
        quintals = to_decimal(event.quantity_quintals)
        variety = _variety(event.variety)
        key = StockKey.rice(variety, event.location, event.product_type, event.packaging)
        return PostingGroup(
            kind=MovementKind.RICE_PRODUCTION,
            event=event,
            postings=(Posting(delta=quintals, key=key),),
            quantity=quintals,
            net_effect=quintals,
            variety=variety,
            source=event.outturn,
            destination=event.location,
            outturn=event.outturn,
            product_type=event.product_type,
            kunchinittus=(event.location,) if event.location else (),
        )
    if isinstance(event, (RicePurchase, RiceSale)):
        quintals = to_decimal(event.quintals)
        variety = _variety(event.variety)
        key = StockKey.rice(variety, event.location, event.product_type, event.packaging)
        is_sale = isinstance(event, RiceSale)
        return PostingGroup(
            kind=event.kind,
            event=event,
            postings=(Posting(delta=-quintals if is_sale else quintals, key=key),),
            quantity=quintals,
            net_effect=-quintals if is_sale else quintals,
            variety=variety,
            source=event.location if is_sale else "",
            destination="" if is_sale else event.location,
            product_type=event.product_type,
            note=f"{to_decimal(event.bags):f} bags {event.packaging}",
            kunchinittus=(event.location,),
        )
    if isinstance(event, Palti):
        variety = _variety(event.variety)
        source = StockKey.rice(variety, event.location, event.product_type, event.source_packaging)
        target = StockKey.rice(variety, event.location, event.product_type, event.target_packaging)
        source_quintals = event.source_quintals
        target_quintals = event.target_quintals
        return PostingGroup(
            kind=MovementKind.PALTI,
            event=event,
            postings=(
                Posting(delta=-source_quintals, key=source),
                Posting(delta=target_quintals, key=target),
            ),
            quantity=source_quintals,
            net_effect=target_quintals - source_quintals,
            variety=variety,
            source=event.source_packaging,
            destination=event.target_packaging,
            product_type=event.product_type,
            note=f"shortage {event.shortage_kg.quantize(TWO_PLACES)} kg",
            kunchinittus=(event.location,),
        )
    if isinstance(event, (PaddyPurchase, LooseEntry, Shift, ProductionShift, KunchinittuClosure, ClearingEvent)):
        return None
    raise TypeError(f"Unsupported movement event: {event!r}")
