"""Multi-day replay of the stock books.

The driver walks every calendar day of the requested range in ascending
order, hands each day's events to an engine and threads the closing ledger
of one day into the opening ledger of the next. It never touches the
database: callers pass in the events and, optionally, an opening ledger.
"""
from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Mapping, Sequence

from django.utils.dateparse import parse_date

from .events import MovementEvent
from .ledger import StockLedger
from .reconciliation import DailySnapshot, LedgerReplayEngine

logger = logging.getLogger(__name__)

GROUP_BY_DAY = "day"
GROUP_BY_WEEK = "week"
GROUPINGS = (GROUP_BY_DAY, GROUP_BY_WEEK)


@dataclass(frozen=True)
class ReconciliationRequest:
    """What the caller wants to see; the range drives the replay, the
    kunchinittu and grouping only shape the output."""

    date_from: date | None = None
    date_to: date | None = None
    month: str = ""
    kunchinittu: str = ""
    grouping: str = GROUP_BY_DAY
    generation: str = ""

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "ReconciliationRequest":
        date_from = _parse_day(params.get("date_from"), "date_from")
        date_to = _parse_day(params.get("date_to"), "date_to")
        month = (params.get("month") or "").strip()
        if month:
            _month_bounds(month)
        grouping = (params.get("grouping") or GROUP_BY_DAY).strip().lower()
        if grouping not in GROUPINGS:
            raise ValueError(f"grouping must be one of: {', '.join(GROUPINGS)}.")
        if date_from and date_to and date_from > date_to:
            raise ValueError("date_from must not be after date_to.")
        return cls(
            date_from=date_from,
            date_to=date_to,
            month=month,
            kunchinittu=(params.get("kunchinittu") or "").strip(),
            grouping=grouping,
            generation=(params.get("generation") or "").strip(),
        )

    def resolved_range(self) -> tuple[date | None, date | None]:
        """Explicit dates win over the month; missing ends stay open."""
        start, end = self.date_from, self.date_to
        if self.month:
            month_start, month_end = _month_bounds(self.month)
            start = start or month_start
            end = end or month_end
        return start, end


@dataclass(frozen=True)
class ReconciliationResult:
    days: list[DailySnapshot]
    grouping: str = GROUP_BY_DAY
    generation: str = ""
    kunchinittu: str = ""
    opening_seeded: bool = False

    @property
    def days_desc(self) -> list[DailySnapshot]:
        return list(reversed(self.days))

    @property
    def consistent(self) -> bool:
        return all(day.consistent for day in self.days)

    def groups(self) -> list[tuple[str, list[DailySnapshot]]]:
        """Days grouped for presentation, most recent group and day first."""
        grouped: dict[str, list[DailySnapshot]] = {}
        for day in self.days_desc:
            grouped.setdefault(group_label(day.date, self.grouping), []).append(day)
        return list(grouped.items())


def group_label(day: date, grouping: str) -> str:
    if grouping == GROUP_BY_WEEK:
        monday = day - timedelta(days=day.weekday())
        sunday = monday + timedelta(days=6)
        return f"{monday:%d/%m/%Y} - {sunday:%d/%m/%Y}"
    return f"{day:%d/%m/%Y}"


def calendar_days(start: date, end: date) -> list[date]:
    """Every date from ``start`` to ``end`` inclusive."""
    if start > end:
        return []
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def events_by_day(events: Iterable[MovementEvent]) -> dict[date, list[MovementEvent]]:
    grouped: dict[date, list[MovementEvent]] = defaultdict(list)
    for event in events:
        grouped[event.date].append(event)
    return grouped


def replay(
    engine: LedgerReplayEngine,
    events: Sequence[MovementEvent],
    *,
    start: date | None = None,
    end: date | None = None,
    opening: StockLedger | None = None,
) -> list[DailySnapshot]:
    """Reconcile every day from ``start`` to ``end``.

    Open ends fall back to the first and last event date. Without an
    ``opening`` ledger, events dated before ``start`` are folded first to
    build it; with one, those events are ignored.
    """
    by_day = events_by_day(events)
    if not by_day and (start is None or end is None):
        return []
    first = start or min(by_day)
    last = end or max(max(by_day), first)

    if opening is not None:
        ledger = opening.copy()
    else:
        ledger = StockLedger()
        earlier = sorted(day for day in by_day if day < first)
        if earlier:
            logger.debug("Folding %s earlier day(s) into the opening of %s", len(earlier), first)
        for day in earlier:
            ledger = engine.reconcile(day, ledger, by_day[day]).closing

    snapshots: list[DailySnapshot] = []
    for day in calendar_days(first, last):
        snapshot = engine.reconcile(day, ledger, by_day.get(day, ()))
        snapshots.append(snapshot)
        ledger = snapshot.closing.copy()
    return snapshots


def run(
    request: ReconciliationRequest,
    engine: LedgerReplayEngine,
    events: Sequence[MovementEvent],
    *,
    opening: StockLedger | None = None,
) -> ReconciliationResult:
    start, end = request.resolved_range()
    days = replay(engine, events, start=start, end=end, opening=opening)
    if request.kunchinittu:
        days = [day.restricted_to(request.kunchinittu) for day in days]
    inconsistent = [day.date for day in days if not day.consistent]
    if inconsistent:
        logger.warning("%s book inconsistent on %s day(s), first %s", engine.book, len(inconsistent), inconsistent[0])
    return ReconciliationResult(
        days=days,
        grouping=request.grouping,
        generation=request.generation,
        kunchinittu=request.kunchinittu,
        opening_seeded=opening is not None,
    )


def _parse_day(raw: str | None, name: str) -> date | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        parsed = parse_date(raw)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValueError(f"{name} must be a date in YYYY-MM-DD format.")
    return parsed


def _month_bounds(month: str) -> tuple[date, date]:
    try:
        year_raw, month_raw = month.split("-")
        year, month_number = int(year_raw), int(month_raw)
        last_day = calendar.monthrange(year, month_number)[1]
        return date(year, month_number, 1), date(year, month_number, last_day)
    except ValueError:
        raise ValueError("month must be in YYYY-MM format.") from None
