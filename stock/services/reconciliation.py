"""Daily reconciliation of the paddy book.

``PaddyReconciliationEngine.reconcile`` takes one calendar day, the opening
ledger carried from the previous day and that day's events, and returns a
:class:`DailySnapshot` with the opening stock, the classified movements and
the closing stock. Warehouse balances (``variety|location``) and balances
held against outturns (``variety|kunchinittu|outturn``) share one ledger.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from django.conf import settings

from .clearing import ClearedOutturnFilter
from .events import (
    MOVEMENT_COLORS,
    ZERO,
    MovementEvent,
    MovementKind,
    PostingGroup,
    ProductionShift,
    PaddyPurchase,
    RiceProductionEvent,
    StockKey,
    paddy_postings,
)
from .ledger import StockLedger

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = Decimal("0.5")


@dataclass(frozen=True)
class MovementEntry:
    kind: str
    color: str
    variety: str
    quantity: Decimal
    source: str = ""
    destination: str = ""
    outturn: str = ""
    product_type: str = ""
    note: str = ""
    event_id: object = None
    clamped: bool = False
    skipped: bool = False
    net_effect: Decimal = ZERO
    applied_effect: Decimal = ZERO
    kunchinittus: tuple[str, ...] = ()

    @property
    def shortfall(self) -> Decimal:
        """Ledger change minus the declared net effect, zero when the group
        applied in full."""
        return self.applied_effect - self.net_effect


@dataclass(frozen=True)
class DailySnapshot:
    date: date
    opening: StockLedger
    movements: list[MovementEntry]
    closing: StockLedger
    deltas: dict[StockKey, Decimal]
    event_count: int = 0
    consistent: bool = True
    cleared: dict[StockKey, Decimal] = field(default_factory=dict)

    @property
    def mill_closed(self) -> bool:
        return self.event_count == 0

    @property
    def opening_total(self) -> Decimal:
        return self.opening.total()

    @property
    def closing_total(self) -> Decimal:
        return self.closing.total()

    def restricted_to(self, kunchinittu: str) -> "DailySnapshot":
        """The same day seen from one kunchinittu: only its balances and the
        movements that touch it.

        Rice balances match on their stock location. Outturn balances held at
        no kunchinittu show under every kunchinittu.
        """

        def keep(key: StockKey) -> bool:
            if key.is_rice:
                return key.location == kunchinittu
            if key.is_production and not key.kunchinittu:
                return True
            return key.kunchinittu == kunchinittu

        def touches(entry: MovementEntry) -> bool:
            if kunchinittu in entry.kunchinittus:
                return True
            return bool(entry.outturn) and "" in entry.kunchinittus

        movements = [entry for entry in self.movements if touches(entry)]
        return replace(
            self,
            opening=self.opening.filtered(keep),
            closing=self.closing.filtered(keep),
            movements=movements,
            deltas={key: delta for key, delta in self.deltas.items() if keep(key)},
            event_count=len(movements),
            cleared={key: quantity for key, quantity in self.cleared.items() if keep(key)},
        )


class LedgerReplayEngine:
    """Replays one day of posting groups against a ledger.

    Subclasses provide ``normalize`` (event to posting group) and
    ``kind_order`` (the order in which kinds are processed within a day).
    """

    kind_order: Sequence[str] = ()
    book = "stock"

    def __init__(self, *, tolerance: Decimal | None = None) -> None:
        if tolerance is None:
            tolerance = getattr(settings, "STOCK_CONSERVATION_TOLERANCE", DEFAULT_TOLERANCE)
        self.tolerance = Decimal(tolerance)

    def normalize(self, event: MovementEvent) -> PostingGroup | None:
        raise NotImplementedError

    def reconcile(self, day: date, opening: StockLedger, events: Iterable[MovementEvent]) -> DailySnapshot:
        events = list(events)
        opening = opening.copy()
        self.before_day(opening, day)
        ledger = opening.copy()

        entries: list[MovementEntry] = []
        for group in self._ordered_groups(events):
            entries.append(self._apply_group(ledger, group))

        cleared = self.after_day(ledger, day, entries)
        deltas = ledger.deltas_from(opening)
        consistent = self._check_conservation(day, opening, ledger, entries)
        return DailySnapshot(
            date=day,
            opening=opening,
            movements=entries,
            closing=ledger,
            deltas=deltas,
            event_count=len(events),
            consistent=consistent,
            cleared=cleared,
        )

    def before_day(self, opening: StockLedger, day: date) -> None:
        """Hook run on the opening ledger before any event is applied."""

    def after_day(self, ledger: StockLedger, day: date, entries: list[MovementEntry]) -> dict[StockKey, Decimal]:
        """Hook run on the closing ledger; returns balances written off."""
        return {}

    def _ordered_groups(self, events: Sequence[MovementEvent]) -> list[PostingGroup]:
        rank = {kind: position for position, kind in enumerate(self.kind_order)}
        groups = [group for group in (self.normalize(event) for event in events) if group is not None]
        # sorted() is stable: events of one kind keep their source order.
        return sorted(groups, key=lambda group: rank.get(group.kind, len(rank)))

    def _apply_group(self, ledger: StockLedger, group: PostingGroup) -> MovementEntry:
        """Apply one group. The entry keeps the group's declared net effect
        and records the change that actually reached the ledger beside it."""
        total_before = ledger.total()
        clamped = False
        skipped = False
        written_off = ZERO
        kunchinittus = group.kunchinittus
        for posting in group.postings:
            if posting.kunchinittu:
                written_off += self._write_off_kunchinittu(ledger, posting.kunchinittu)
                continue
            if posting.key is not None:
                applied = ledger.apply(posting.key, posting.delta)
            elif not ledger.keys_for_outturn(posting.outturn):
                logger.warning(
                    "No paddy held against outturn %s for %s %s; deduction of %s bags skipped",
                    posting.outturn,
                    group.kind,
                    getattr(group.event, "id", "?"),
                    -posting.delta,
                )
                skipped = True
                break
            else:
                held_at = tuple(sorted({key.kunchinittu for key in ledger.keys_for_outturn(posting.outturn)}))
                kunchinittus += tuple(code for code in held_at if code not in kunchinittus)
                applied = self._debit_outturn(ledger, posting.outturn, -posting.delta)
            if not applied and posting.is_debit:
                clamped = True
                if len(group.postings) > 1:
                    logger.warning(
                        "%s %s on %s: source debit clamped, destination not credited",
                        group.kind,
                        getattr(group.event, "id", "?"),
                        getattr(group.event, "date", "?"),
                    )
                break

        quantity = group.quantity
        applied_effect = ledger.total() - total_before
        net_effect = group.net_effect
        if net_effect is None:
            quantity = written_off
            net_effect = -written_off
        return MovementEntry(
            kind=group.kind,
            color=group.color,
            variety=group.variety,
            quantity=quantity,
            source=group.source,
            destination=group.destination,
            outturn=group.outturn,
            product_type=group.product_type,
            note=group.note,
            event_id=getattr(group.event, "id", None),
            clamped=clamped,
            skipped=skipped,
            net_effect=net_effect,
            applied_effect=applied_effect,
            kunchinittus=kunchinittus,
        )

    def _debit_outturn(self, ledger: StockLedger, outturn: str, amount: Decimal) -> bool:
        remaining = amount
        for key in ledger.keys_for_outturn(outturn):
            if remaining <= 0:
                break
            take = min(ledger.get(key), remaining)
            ledger.apply(key, -take)
            remaining -= take
        if remaining > 0:
            logger.warning(
                "Insufficient paddy in outturn %s: %s bags short; clamped to zero",
                outturn,
                remaining,
            )
            return False
        return True

    def _write_off_kunchinittu(self, ledger: StockLedger, kunchinittu: str) -> Decimal:
        total = ZERO
        for key in ledger.keys_for_kunchinittu(kunchinittu):
            total += ledger.write_off(key)
        return total

    def _check_conservation(
        self,
        day: date,
        opening: StockLedger,
        closing: StockLedger,
        entries: Sequence[MovementEntry],
    ) -> bool:
        expected = opening.total() + sum((entry.net_effect for entry in entries), ZERO)
        actual = closing.total()
        if abs(actual - expected) > self.tolerance:
            logger.warning(
                "%s book out of balance on %s: closing %s, expected %s",
                self.book,
                day,
                actual,
                expected,
            )
            return False
        return True


class PaddyReconciliationEngine(LedgerReplayEngine):
    kind_order = (
        MovementKind.PURCHASE,
        MovementKind.LOOSE,
        MovementKind.PRODUCTION_PURCHASE,
        MovementKind.SHIFT,
        MovementKind.PRODUCTION_SHIFT,
        MovementKind.RICE_PRODUCTION,
        MovementKind.CLOSURE,
    )
    book = "paddy"

    def __init__(
        self,
        *,
        clearings: ClearedOutturnFilter | None = None,
        history: Iterable[MovementEvent] = (),
        tolerance: Decimal | None = None,
    ) -> None:
        super().__init__(tolerance=tolerance)
        self.clearings = clearings or ClearedOutturnFilter()
        self.outturn_varieties = outturn_varieties(history)

    def normalize(self, event: MovementEvent) -> PostingGroup | None:
        group = paddy_postings(event)
        if group is not None and group.kind == MovementKind.RICE_PRODUCTION and not group.variety:
            group = replace(group, variety=self.outturn_varieties.get(group.outturn, ""))
        return group

    def before_day(self, opening: StockLedger, day: date) -> None:
        self.clearings.filter_opening(opening, day)

    def after_day(self, ledger: StockLedger, day: date, entries: list[MovementEntry]) -> dict[StockKey, Decimal]:
        cleared = self.clearings.filter_closing(ledger, day)
        for key, quantity in cleared.items():
            entries.append(
                MovementEntry(
                    kind=MovementKind.CLEARING,
                    color=MOVEMENT_COLORS[MovementKind.CLEARING],
                    variety=key.variety,
                    quantity=quantity,
                    source=key.outturn,
                    destination="Cleared",
                    outturn=key.outturn,
                    note="Remaining paddy written off",
                    event_id=key.outturn,
                    net_effect=-quantity,
                    applied_effect=-quantity,
                    kunchinittus=(key.kunchinittu,),
                )
            )
        return cleared


def outturn_varieties(history: Iterable[MovementEvent]) -> dict[str, str]:
    """Variety of the paddy first committed to each outturn."""
    varieties: dict[str, str] = {}
    for event in history:
        if isinstance(event, (ProductionShift, PaddyPurchase)) and event.outturn and event.variety:
            varieties.setdefault(event.outturn, event.variety.strip())
        elif isinstance(event, RiceProductionEvent) and event.variety:
            varieties.setdefault(event.outturn, event.variety)
    return varieties

