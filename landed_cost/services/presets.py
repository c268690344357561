"""Saved factory/cost-item selections ("presets").

A slot keeps the factory id as an opaque string together with the cost
values captured when it was saved. Restoring a preset replays those saved
values; live cost items are never consulted for amounts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping

from landed_cost.core.config import get_settings
from landed_cost.core.logging import get_logger
from landed_cost.models.enums import ChargeType
from landed_cost.models.preset import FactoryPreset
from landed_cost.schemas.preset import SlotSchema
from landed_cost.services.aggregator import CostLine, FactorySelection

logger = get_logger(__name__)


class CapacityExceeded(Exception):
    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f"At most {capacity} presets can be saved. Delete one before saving another.")


class PresetNotFound(LookupError):
    pass


@dataclass(frozen=True)
class Slot:
    factory_id: str
    selected_item_ids: tuple[str, ...]
    cost_values: Mapping[str, Decimal]
    charge_type_values: Mapping[str, ChargeType]

    @classmethod
    def load(cls, data: Any) -> "Slot":
        schema = data if isinstance(data, SlotSchema) else SlotSchema.model_validate(data)
        return cls(
            factory_id=schema.factory_id,
            selected_item_ids=tuple(schema.selected_item_ids),
            cost_values=dict(schema.cost_values),
            charge_type_values=dict(schema.charge_type_values),
        )

    def dump(self) -> dict[str, Any]:
        return {
            "factory_id": self.factory_id,
            "selected_item_ids": list(self.selected_item_ids),
            "cost_values": {key: str(value) for key, value in self.cost_values.items()},
            "charge_type_values": {key: value.value for key, value in self.charge_type_values.items()},
        }


@dataclass
class RestoredPreset:
    preset_id: str
    selections: list[FactorySelection]
    warnings: list[str] = field(default_factory=list)


def load_slots(raw_slots: Iterable[Any] | None) -> list[Slot]:
    return [Slot.load(item) for item in raw_slots or []]


class PresetManager:
    def __init__(self, repo, capacity: int | None = None) -> None:
        self.repo = repo
        self.capacity = capacity if capacity is not None else get_settings().preset_capacity

    async def list(self) -> list[FactoryPreset]:
        presets = await self.repo.list_all()
        return sorted(presets, key=lambda preset: preset.sort_order)

    async def get(self, preset_id) -> FactoryPreset:
        preset = await self.repo.get(preset_id)
        if preset is None:
            raise PresetNotFound(f"Preset {preset_id} not found")
        return preset

    async def get_default(self) -> FactoryPreset | None:
        presets = await self.list()
        return next((preset for preset in presets if preset.is_default), None)

    async def create(self, name: str, slots: Iterable[Any]) -> FactoryPreset:
        dumped = [Slot.load(slot).dump() for slot in slots]
        async with self.repo.create_guard():
            existing = await self.repo.list_all()
            if len(existing) >= self.capacity:
                logger.info("preset_capacity_exceeded", count=len(existing), capacity=self.capacity)
                raise CapacityExceeded(self.capacity)
            max_sort_order = max((preset.sort_order for preset in existing), default=0)
            preset = FactoryPreset(
                name=name,
                slots=dumped,
                is_default=False,
                sort_order=max_sort_order + 1,
            )
            return await self.repo.create(preset)

    async def update(self, preset_id, fields: Mapping[str, Any]) -> FactoryPreset:
        """Apply only the provided fields; absent or null keys keep their stored value."""
        preset = await self.get(preset_id)
        for key, value in fields.items():
            if key not in {"name", "slots", "sort_order"} or value is None:
                continue
            if key == "slots":
                value = [Slot.load(slot).dump() for slot in value]
            setattr(preset, key, value)
        return await self.repo.update(preset)

    async def remove(self, preset_id) -> None:
        preset = await self.get(preset_id)
        await self.repo.delete(preset)

    async def set_default(self, preset_id) -> FactoryPreset:
        preset = await self.get(preset_id)
        for other in await self.repo.list_all():
            if other.is_default and str(other.id) != str(preset.id):
                other.is_default = False
                await self.repo.update(other)
        preset.is_default = True
        return await self.repo.update(preset)

    async def clear_default(self, preset_id) -> FactoryPreset:
        preset = await self.get(preset_id)
        preset.is_default = False
        return await self.repo.update(preset)


def restore(
    preset: Any,
    factories: Mapping[str, Any],
    item_names: Mapping[str, str] | None = None,
) -> RestoredPreset:
    """Turn a stored preset into factory selections using the saved cost values.

    ``factories`` supplies each factory's currency; ``item_names`` only labels
    lines. Selected items without a saved amount contribute nothing.
    """
    item_names = item_names or {}
    restored = RestoredPreset(preset_id=str(preset.id), selections=[])
    for slot in load_slots(preset.slots):
        factory = factories.get(slot.factory_id)
        if factory is None:
            restored.warnings.append(f"Factory {slot.factory_id} in preset {preset.name} no longer exists; slot skipped.")
            continue
        lines = []
        for item_id in slot.selected_item_ids:
            amount = slot.cost_values.get(item_id)
            if amount is None:
                restored.warnings.append(f"No saved amount for cost item {item_id}; counted as zero.")
                continue
            lines.append(
                CostLine(
                    item_id=item_id,
                    name=item_names.get(item_id),
                    amount=amount,
                    charge_type=slot.charge_type_values.get(item_id, ChargeType.ONCE),
                )
            )
        restored.selections.append(
            FactorySelection(
                factory_id=slot.factory_id,
                factory_name=factory.name,
                currency=factory.currency,
                lines=lines,
            )
        )
    return restored
