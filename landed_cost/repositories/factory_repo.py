from __future__ import annotations

import uuid
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.models.factory import Factory, FactoryCostItem
from landed_cost.repositories.shipping_repo import _uuid


class FactoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, active_only: bool = True) -> list[Factory]:
        query = select(Factory).order_by(Factory.sort_order, Factory.created_at)
        if active_only:
            query = query.where(Factory.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(self, factory_id: str | uuid.UUID) -> Factory | None:
        try:
            value = _uuid(factory_id)
        except ValueError:
            return None
        return await self.session.get(Factory, value)

    async def get_many(self, factory_ids: list[str]) -> dict[str, Factory]:
        values = []
        for factory_id in factory_ids:
            try:
                values.append(_uuid(factory_id))
            except ValueError:
                continue
        if not values:
            return {}
        result = await self.session.execute(select(Factory).where(Factory.id.in_(values)))
        return {str(factory.id): factory for factory in result.scalars().all()}

    async def create(self, factory: Factory) -> Factory:
        self.session.add(factory)
        await self.session.commit()
        await self.session.refresh(factory)
        return factory

    async def update(self, factory: Factory) -> Factory:
        self.session.add(factory)
        await self.session.commit()
        await self.session.refresh(factory)
        return factory

    async def soft_delete(self, factory: Factory) -> Factory:
        factory.is_active = False
        return await self.update(factory)

    async def delete(self, factory: Factory) -> None:
        await self.session.delete(factory)
        await self.session.commit()


class FactoryCostItemRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, factory_id: str | uuid.UUID | None = None, active_only: bool = True) -> list[FactoryCostItem]:
        query = select(FactoryCostItem).order_by(FactoryCostItem.sort_order, FactoryCostItem.created_at)
        if factory_id is not None:
            query = query.where(FactoryCostItem.factory_id == _uuid(factory_id))
        if active_only:
            query = query.where(FactoryCostItem.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(self, item_id: str | uuid.UUID) -> FactoryCostItem | None:
        return await self.session.get(FactoryCostItem, _uuid(item_id))

    async def create(self, item: FactoryCostItem) -> FactoryCostItem:
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def update(self, item: FactoryCostItem) -> FactoryCostItem:
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def soft_delete(self, item: FactoryCostItem) -> FactoryCostItem:
        item.is_active = False
        return await self.update(item)

    async def delete(self, item: FactoryCostItem) -> None:
        await self.session.delete(item)
        await self.session.commit()
