from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.models.preset import FactoryPreset
from landed_cost.repositories.shipping_repo import _uuid

# arbitrary key for pg_advisory_xact_lock, shared by every preset creator
PRESET_CREATE_LOCK_KEY = 7_302_115


class PresetRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def create_guard(self):
        """Serialize count-then-insert; the lock lives until commit or rollback."""
        if self.session.bind is not None and self.session.bind.dialect.name == "postgresql":
            await self.session.execute(select(func.pg_advisory_xact_lock(PRESET_CREATE_LOCK_KEY)))
        try:
            yield
        except Exception:
            await self.session.rollback()
            raise

    async def list_all(self) -> list[FactoryPreset]:
        result = await self.session.execute(select(FactoryPreset).order_by(FactoryPreset.sort_order))
        return list(result.scalars().all())

    async def get(self, preset_id: str | uuid.UUID) -> FactoryPreset | None:
        try:
            value = _uuid(preset_id)
        except ValueError:
            return None
        return await self.session.get(FactoryPreset, value)

    async def create(self, preset: FactoryPreset) -> FactoryPreset:
        self.session.add(preset)
        await self.session.commit()
        await self.session.refresh(preset)
        return preset

    async def update(self, preset: FactoryPreset) -> FactoryPreset:
        self.session.add(preset)
        await self.session.commit()
        await self.session.refresh(preset)
        return preset

    async def delete(self, preset: FactoryPreset) -> None:
        await self.session.delete(preset)
        await self.session.commit()
