from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from .events import HUNDRED, TWO_PLACES, ZERO, to_decimal

# Field name on a by-product entry, display label.
BY_PRODUCT_FIELDS: tuple[tuple[str, str], ...] = (
    ("rice", "Rice"),
    ("rejection_rice", "Rejection Rice"),
    ("rj_rice_1", "RJ Rice 1"),
    ("rj_rice_2", "RJ Rice 2"),
    ("broken", "Broken"),
    ("rejection_broken", "Rejection Broken"),
    ("zero_broken", "Zero Broken"),
    ("sizer_broken", "Sizer Broken"),
    ("faram", "Faram"),
    ("bran", "Bran"),
    ("unpolished", "Unpolished"),
)


@dataclass(frozen=True)
class ByProductEntry:
    """Quintals of each product recorded against an outturn on one day."""

    date: date
    quantities: Mapping[str, Decimal]

    @classmethod
    def from_record(cls, record: object) -> "ByProductEntry":
        return cls(
            date=getattr(record, "date"),
            quantities={name: to_decimal(getattr(record, name, ZERO)) for name, _ in BY_PRODUCT_FIELDS},
        )


@dataclass(frozen=True)
class ProductYield:
    field: str
    label: str
    quintals: Decimal
    yield_percentage: Decimal


@dataclass(frozen=True)
class ByProductYield:
    outturn: str
    paddy_input_quintals: Decimal
    products: list[ProductYield]
    total_quintals: Decimal
    yield_percentage: Decimal
    entry_count: int

    def as_dict(self) -> dict[str, object]:
        return {
            "outturn": self.outturn,
            "paddy_input_quintals": str(self.paddy_input_quintals),
            "entries": self.entry_count,
            "total_quintals": str(self.total_quintals),
            "yield_percentage": str(self.yield_percentage),
            "products": [
                {
                    "field": product.field,
                    "label": product.label,
                    "quintals": str(product.quintals),
                    "yield_percentage": str(product.yield_percentage),
                }
                for product in self.products
            ],
        }


def yield_percentage(quintals: Decimal, paddy_input_quintals: Decimal) -> Decimal:
    if paddy_input_quintals <= 0:
        return ZERO.quantize(TWO_PLACES)
    return (quintals / paddy_input_quintals * HUNDRED).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def aggregate_by_products(
    outturn: str,
    entries: Iterable[ByProductEntry],
    paddy_input_quintals: object,
) -> ByProductYield:
    """Sum every entry per product and express each total, and the overall
    total, as a percentage of the paddy that went into the outturn."""
    paddy_input = to_decimal(paddy_input_quintals)
    totals = {name: ZERO for name, _ in BY_PRODUCT_FIELDS}
    count = 0
    for entry in entries:
        count += 1
        for name in totals:
            totals[name] += to_decimal(entry.quantities.get(name, ZERO))

    products = [
        ProductYield(
            field=name,
            label=label,
            quintals=totals[name].quantize(TWO_PLACES),
            yield_percentage=yield_percentage(totals[name], paddy_input),
        )
        for name, label in BY_PRODUCT_FIELDS
    ]
    total = sum(totals.values(), ZERO)
    return ByProductYield(
        outturn=outturn,
        paddy_input_quintals=paddy_input.quantize(TWO_PLACES),
        products=products,
        total_quintals=total.quantize(TWO_PLACES),
        yield_percentage=yield_percentage(total, paddy_input),
        entry_count=count,
    )
