import uuid
from contextlib import asynccontextmanager
from decimal import Decimal
from types import SimpleNamespace

import pytest

from landed_cost.schemas.preset import PresetUpdate
from landed_cost.services.presets import CapacityExceeded, PresetManager, PresetNotFound, Slot, restore


class FakePresetRepo:
    def __init__(self) -> None:
        self.items = {}
        self.clock = 0

    @asynccontextmanager
    async def create_guard(self):
        yield

    async def list_all(self):
        return sorted(self.items.values(), key=lambda preset: preset.sort_order)

    async def get(self, preset_id):
        return self.items.get(str(preset_id))

    async def create(self, preset):
        self.clock += 1
        preset.id = uuid.uuid4()
        preset.created_at = self.clock
        preset.updated_at = self.clock
        self.items[str(preset.id)] = preset
        return preset

    async def update(self, preset):
        self.clock += 1
        preset.updated_at = self.clock
        return preset

    async def delete(self, preset):
        self.items.pop(str(preset.id))


def _slot(factory_id="f1"):
    return {
        "factory_id": factory_id,
        "selected_item_ids": ["i1"],
        "cost_values": {"i1": "450"},
    }


@pytest.mark.asyncio
async def test_eleventh_preset_is_rejected_and_storage_unchanged():
    repo = FakePresetRepo()
    manager = PresetManager(repo, capacity=10)
    for index in range(10):
        await manager.create(f"P{index}", [_slot()])

    with pytest.raises(CapacityExceeded):
        await manager.create("P10", [_slot()])

    assert len(repo.items) == 10


@pytest.mark.asyncio
async def test_presets_list_in_creation_order():
    manager = PresetManager(FakePresetRepo(), capacity=10)
    for name in ("P1", "P2", "P3"):
        await manager.create(name, [])

    presets = await manager.list()

    assert [preset.name for preset in presets] == ["P1", "P2", "P3"]
    orders = [preset.sort_order for preset in presets]
    assert orders == sorted(set(orders))


@pytest.mark.asyncio
async def test_update_only_touches_given_fields():
    manager = PresetManager(FakePresetRepo(), capacity=10)
    preset = await manager.create("Original", [_slot()])
    slots_before = list(preset.slots)

    updated = await manager.update(preset.id, {"name": "Renamed"})

    assert updated.name == "Renamed"
    assert updated.slots == slots_before
    assert updated.sort_order == 1


@pytest.mark.asyncio
async def test_update_ignores_explicit_nulls():
    manager = PresetManager(FakePresetRepo(), capacity=10)
    preset = await manager.create("Keep", [_slot()])
    payload = PresetUpdate.model_validate({"name": None, "sort_order": None, "slots": None})

    updated = await manager.update(preset.id, payload.model_dump(exclude_unset=True))

    assert updated.name == "Keep"
    assert updated.sort_order == 1
    assert len(updated.slots) == 1
    assert payload.changes() == {}


@pytest.mark.asyncio
async def test_remove_then_get_fails():
    manager = PresetManager(FakePresetRepo(), capacity=10)
    preset = await manager.create("Gone", [])

    await manager.remove(preset.id)

    with pytest.raises(PresetNotFound):
        await manager.get(preset.id)


@pytest.mark.asyncio
async def test_single_default():
    manager = PresetManager(FakePresetRepo(), capacity=10)
    first = await manager.create("First", [])
    second = await manager.create("Second", [])

    await manager.set_default(first.id)
    await manager.set_default(second.id)

    assert first.is_default is False
    assert (await manager.get_default()).id == second.id

    await manager.clear_default(second.id)
    assert await manager.get_default() is None


def test_slot_rejects_negative_cost():
    with pytest.raises(ValueError):
        Slot.load({"factory_id": "f1", "cost_values": {"i1": "-5"}})


def test_slot_dump_stores_amounts_as_strings():
    raw = {"factory_id": uuid.UUID(int=1), "selected_item_ids": [uuid.UUID(int=2)], "cost_values": {"a": 1.5}}

    dumped = Slot.load(raw).dump()

    assert dumped["factory_id"] == str(uuid.UUID(int=1))
    assert dumped["selected_item_ids"] == [str(uuid.UUID(int=2))]
    assert dumped["cost_values"] == {"a": "1.5"}


def test_restore_replays_saved_values_only():
    preset = SimpleNamespace(
        id="p1",
        name="Usual",
        slots=[
            {
                "factory_id": "f1",
                "selected_item_ids": ["i1", "i2"],
                "cost_values": {"i1": "450"},
                "charge_type_values": {"i1": "per_quantity"},
            },
            _slot("deleted-factory"),
        ],
    )
    factories = {"f1": SimpleNamespace(name="Ningbo Plant", currency="CNY")}

    restored = restore(preset, factories, {"i1": "Packing"})

    assert len(restored.selections) == 1
    line = restored.selections[0].lines[0]
    assert line.amount == Decimal("450")
    assert line.name == "Packing"
    assert line.charge_type.value == "per_quantity"
    assert len(restored.selections[0].lines) == 1
    assert len(restored.warnings) == 2
