from __future__ import annotations

import uuid
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.models.company_cost import CompanyCostItem
from landed_cost.models.cost_setting import CostSetting
from landed_cost.models.enums import CostSettingType
from landed_cost.repositories.shipping_repo import _uuid


class CompanyCostItemRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, company_id: str | uuid.UUID) -> list[CompanyCostItem]:
        result = await self.session.execute(
            select(CompanyCostItem)
            .where(CompanyCostItem.company_id == _uuid(company_id))
            .order_by(CompanyCostItem.sort_order, CompanyCostItem.created_at)
        )
        return list(result.scalars().all())

    async def get(self, item_id: str | uuid.UUID) -> CompanyCostItem | None:
        return await self.session.get(CompanyCostItem, _uuid(item_id))

    async def create(self, item: CompanyCostItem) -> CompanyCostItem:
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def create_bulk(self, items: list[CompanyCostItem]) -> list[CompanyCostItem]:
        self.session.add_all(items)
        await self.session.commit()
        for item in items:
            await self.session.refresh(item)
        return items

    async def update(self, item: CompanyCostItem) -> CompanyCostItem:
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def delete(self, item: CompanyCostItem) -> None:
        await self.session.delete(item)
        await self.session.commit()

    async def delete_all(self, company_id: str | uuid.UUID) -> int:
        result = await self.session.execute(
            delete(CompanyCostItem).where(CompanyCostItem.company_id == _uuid(company_id))
        )
        await self.session.commit()
        return result.rowcount or 0


class CostSettingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, active_only: bool = False) -> list[CostSetting]:
        query = select(CostSetting).order_by(CostSetting.created_at)
        if active_only:
            query = query.where(CostSetting.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(self, setting_id: str | uuid.UUID) -> CostSetting | None:
        return await self.session.get(CostSetting, _uuid(setting_id))

    async def get_by_type(self, setting_type: CostSettingType) -> CostSetting | None:
        result = await self.session.execute(select(CostSetting).where(CostSetting.type == setting_type))
        return result.scalar_one_or_none()

    async def create(self, setting: CostSetting) -> CostSetting:
        self.session.add(setting)
        await self.session.commit()
        await self.session.refresh(setting)
        return setting

    async def update(self, setting: CostSetting) -> CostSetting:
        self.session.add(setting)
        await self.session.commit()
        await self.session.refresh(setting)
        return setting

    async def delete(self, setting: CostSetting) -> None:
        await self.session.delete(setting)
        await self.session.commit()
