from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Sequence

from landed_cost.core.logging import get_logger
from landed_cost.models.enums import UnitType
from landed_cost.services.volumetric import granularity_for

logger = get_logger(__name__)


@dataclass(frozen=True)
class Bracket:
    upper_bound: Decimal
    unit_price: Decimal


@dataclass(frozen=True)
class UnitPriceResult:
    unit_price: Decimal
    bracket: Bracket
    extrapolated: bool


def _sort_key(rate_type: Any) -> tuple:
    return (rate_type.sort_order, getattr(rate_type, "created_at", 0) or 0, str(rate_type.id))


class RateCatalog:
    """Read-only view over one warehouse's rate types and their bracket tables."""

    def __init__(self, rate_types: Iterable[Any], brackets: dict[Any, Sequence[Any]] | None = None) -> None:
        self.rate_types = sorted(rate_types, key=_sort_key)
        self._brackets = {str(key): value for key, value in (brackets or {}).items()}

    def resolve_rate_type(self, warehouse_id: Any, rate_type_id: Any = None) -> Any | None:
        """Pick the explicitly chosen rate type, else the warehouse default.

        Several defaults in one warehouse resolve to the lowest ``sort_order``
        (then oldest, then id). With no default the first rate type is used.
        """
        candidates = [rt for rt in self.rate_types if str(rt.warehouse_id) == str(warehouse_id)]
        if not candidates:
            return None

        if rate_type_id is not None:
            return next((rt for rt in candidates if str(rt.id) == str(rate_type_id)), None)

        defaults = [rt for rt in candidates if rt.is_default]
        if len(defaults) > 1:
            logger.warning(
                "multiple_default_rate_types",
                warehouse_id=str(warehouse_id),
                rate_type_ids=[str(rt.id) for rt in defaults],
            )
        if defaults:
            return defaults[0]
        return candidates[0]

    def brackets_for(self, rate_type: Any) -> list[Bracket]:
        return to_brackets(self._brackets.get(str(rate_type.id), []))

    def granularity(self, rate_type: Any) -> Decimal:
        return granularity_for(UnitType(rate_type.unit_type), rate_type.rounding_granularity)

    def resolve_unit_price(self, rate_type: Any, applied_cbm: Decimal) -> UnitPriceResult | None:
        return resolve_unit_price(self.brackets_for(rate_type), applied_cbm)


def to_brackets(rows: Iterable[Any]) -> list[Bracket]:
    brackets = []
    for row in rows:
        if isinstance(row, Bracket):
            brackets.append(row)
        else:
            brackets.append(Bracket(upper_bound=Decimal(str(row.cbm)), unit_price=Decimal(str(row.unit_price))))
    return sorted(brackets, key=lambda b: b.upper_bound)


def resolve_unit_price(brackets: Sequence[Bracket], applied_cbm: Decimal) -> UnitPriceResult | None:
    """Find the lowest bracket whose inclusive upper bound covers ``applied_cbm``.

    Above the last bracket the last bracket's price is used. An empty table
    has no price.
    """
    if not brackets:
        return None
    ordered = sorted(brackets, key=lambda b: b.upper_bound)
    for bracket in ordered:
        if bracket.upper_bound >= applied_cbm:
            return UnitPriceResult(unit_price=bracket.unit_price, bracket=bracket, extrapolated=False)
    last = ordered[-1]
    return UnitPriceResult(unit_price=last.unit_price, bracket=last, extrapolated=True)
