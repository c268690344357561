"""Charges added on top of factory costs and international freight.

Shipping-company cost items are flat per-shipment fees, optionally split
across the orders sharing the shipment. Cost settings price the legs around
the international freight from the shipment's total CBM: inland trucking to
the port, domestic delivery from the port, and 3PL handling.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from decimal import ROUND_CEILING, Decimal
from typing import Any, Iterable, Mapping

from landed_cost.models.enums import CostSettingType

VAT_RATE = Decimal("0.1")

DEFAULT_CONFIGS: dict[CostSettingType, dict[str, Any]] = {
    CostSettingType.INLAND: {"rate_per_cbm": "70"},
    CostSettingType.DOMESTIC: {"base_fee": "50000", "base_cbm": "0.5", "extra_unit": "0.1", "extra_rate": "10000"},
    CostSettingType.THREE_PL: {"rate_per_unit": "15000", "unit": "0.1"},
}

DEFAULT_CURRENCIES = {
    CostSettingType.INLAND: "USD",
    CostSettingType.DOMESTIC: "KRW",
    CostSettingType.THREE_PL: "KRW",
}

DEFAULT_NAMES = {
    CostSettingType.INLAND: "Inland freight",
    CostSettingType.DOMESTIC: "Domestic shipping",
    CostSettingType.THREE_PL: "3PL + delivery",
}

# domestic legs are taxed; the inland leg is billed abroad
VAT_BY_TYPE = {
    CostSettingType.INLAND: False,
    CostSettingType.DOMESTIC: True,
    CostSettingType.THREE_PL: True,
}


def _units(value: Decimal, unit: Decimal) -> Decimal:
    return (value / unit).to_integral_value(rounding=ROUND_CEILING)


@dataclass(frozen=True)
class InlandConfig:
    rate_per_cbm: Decimal

    def cost(self, cbm: Decimal) -> Decimal:
        if cbm <= 0:
            return Decimal("0")
        return cbm * self.rate_per_cbm


@dataclass(frozen=True)
class DomesticConfig:
    base_fee: Decimal
    base_cbm: Decimal
    extra_unit: Decimal
    extra_rate: Decimal

    def cost(self, cbm: Decimal) -> Decimal:
        """Base fee up to ``base_cbm``, then ``extra_rate`` per started ``extra_unit``."""
        if cbm <= 0:
            return Decimal("0")
        if cbm <= self.base_cbm:
            return self.base_fee
        return self.base_fee + _units(cbm - self.base_cbm, self.extra_unit) * self.extra_rate


@dataclass(frozen=True)
class ThreePLConfig:
    rate_per_unit: Decimal
    unit: Decimal

    def cost(self, cbm: Decimal) -> Decimal:
        if cbm <= 0:
            return Decimal("0")
        return _units(cbm, self.unit) * self.rate_per_unit


CONFIG_TYPES = {
    CostSettingType.INLAND: InlandConfig,
    CostSettingType.DOMESTIC: DomesticConfig,
    CostSettingType.THREE_PL: ThreePLConfig,
}


@dataclass(frozen=True)
class CbmCharge:
    type: CostSettingType
    name: str
    currency: str
    config: InlandConfig | DomesticConfig | ThreePLConfig

    @property
    def vat_applicable(self) -> bool:
        return VAT_BY_TYPE[self.type]


def parse_config(setting_type: CostSettingType, raw: Mapping[str, Any]):
    """Build the typed config for a setting; raises ValueError on unknown, missing or bad values."""
    config_cls = CONFIG_TYPES[CostSettingType(setting_type)]
    expected = {item.name for item in fields(config_cls)}
    if set(raw) != expected:
        raise ValueError(f"{CostSettingType(setting_type).value} config needs exactly: {', '.join(sorted(expected))}")
    values = {}
    for key, value in raw.items():
        try:
            number = Decimal(str(value))
        except ArithmeticError as exc:
            raise ValueError(f"{key} is not a number") from exc
        if not number.is_finite() or number < 0:
            raise ValueError(f"{key} must be a non-negative number")
        values[key] = number
    for key in ("extra_unit", "unit"):
        if key in values and values[key] == 0:
            raise ValueError(f"{key} must be greater than zero")
    return config_cls(**values)


def dump_config(config) -> dict[str, str]:
    return {key: str(value) for key, value in asdict(config).items()}


def charges_from_settings(settings: Iterable[Any]) -> list[CbmCharge]:
    """Active cost-setting rows to charges, in inland/domestic/3PL order."""
    by_type = {}
    for setting in settings:
        if not getattr(setting, "is_active", True):
            continue
        setting_type = CostSettingType(setting.type)
        by_type[setting_type] = CbmCharge(
            type=setting_type,
            name=setting.name,
            currency=setting.currency,
            config=parse_config(setting_type, setting.config),
        )
    return [by_type[setting_type] for setting_type in CostSettingType if setting_type in by_type]


@dataclass(frozen=True)
class CompanyCostLine:
    item_id: str
    name: str
    amount: Decimal
    currency: str
    is_divisible: bool = False
    is_vat_applicable: bool = False

    @classmethod
    def from_item(cls, item: Any) -> "CompanyCostLine":
        return cls(
            item_id=str(item.id),
            name=item.name,
            amount=Decimal(str(item.default_amount)),
            currency=item.currency,
            is_divisible=bool(item.is_divisible),
            is_vat_applicable=bool(item.is_vat_applicable),
        )


@dataclass
class ExtraCost:
    kind: str
    name: str
    currency: str
    amount: Decimal
    vat: Decimal
    converted: Decimal | None = None
    item_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return self.amount + self.vat


def vat_for(amount: Decimal, applicable: bool) -> Decimal:
    return amount * VAT_RATE if applicable else Decimal("0")


def company_cost(line: CompanyCostLine, order_count: int) -> ExtraCost:
    orders = max(1, int(order_count))
    amount = line.amount / orders if line.is_divisible else line.amount
    return ExtraCost(
        kind="company",
        name=line.name,
        currency=line.currency,
        amount=amount,
        vat=vat_for(amount, line.is_vat_applicable),
        item_id=line.item_id,
        details={"original_amount": str(line.amount), "order_count": orders if line.is_divisible else 1},
    )


def cbm_charge(charge: CbmCharge, total_cbm: Decimal) -> ExtraCost:
    amount = charge.config.cost(total_cbm)
    return ExtraCost(
        kind=charge.type.value,
        name=charge.name,
        currency=charge.currency,
        amount=amount,
        vat=vat_for(amount, charge.vat_applicable),
    )
