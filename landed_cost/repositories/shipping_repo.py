from __future__ import annotations

import uuid
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.db.base import now_ms
from landed_cost.models.rate_type import RateBracket, RateType
from landed_cost.models.shipping_company import ShippingCompany
from landed_cost.models.warehouse import Warehouse


def _uuid(value: str | uuid.UUID) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class ShippingCompanyRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, active_only: bool = True) -> list[ShippingCompany]:
        query = select(ShippingCompany).order_by(ShippingCompany.created_at)
        if active_only:
            query = query.where(ShippingCompany.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(self, company_id: str | uuid.UUID) -> ShippingCompany | None:
        return await self.session.get(ShippingCompany, _uuid(company_id))

    async def create(self, company: ShippingCompany) -> ShippingCompany:
        self.session.add(company)
        await self.session.commit()
        await self.session.refresh(company)
        return company

    async def update(self, company: ShippingCompany) -> ShippingCompany:
        self.session.add(company)
        await self.session.commit()
        await self.session.refresh(company)
        return company

    async def soft_delete(self, company: ShippingCompany) -> ShippingCompany:
        company.is_active = False
        return await self.update(company)

    async def delete(self, company: ShippingCompany) -> None:
        await self.session.delete(company)
        await self.session.commit()


class WarehouseRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, company_id: str | uuid.UUID | None = None, active_only: bool = True) -> list[Warehouse]:
        query = select(Warehouse).order_by(Warehouse.sort_order, Warehouse.created_at)
        if company_id is not None:
            query = query.where(Warehouse.company_id == _uuid(company_id))
        if active_only:
            query = query.where(Warehouse.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(self, warehouse_id: str | uuid.UUID) -> Warehouse | None:
        return await self.session.get(Warehouse, _uuid(warehouse_id))

    async def create(self, warehouse: Warehouse) -> Warehouse:
        self.session.add(warehouse)
        await self.session.commit()
        await self.session.refresh(warehouse)
        return warehouse

    async def update(self, warehouse: Warehouse) -> Warehouse:
        self.session.add(warehouse)
        await self.session.commit()
        await self.session.refresh(warehouse)
        return warehouse

    async def soft_delete(self, warehouse: Warehouse) -> Warehouse:
        warehouse.is_active = False
        return await self.update(warehouse)

    async def delete(self, warehouse: Warehouse) -> None:
        await self.session.delete(warehouse)
        await self.session.commit()


class RateTypeRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, warehouse_id: str | uuid.UUID) -> list[RateType]:
        result = await self.session.execute(
            select(RateType)
            .where(RateType.warehouse_id == _uuid(warehouse_id))
            .order_by(RateType.sort_order, RateType.created_at)
        )
        return list(result.scalars().all())

    async def get(self, rate_type_id: str | uuid.UUID) -> RateType | None:
        return await self.session.get(RateType, _uuid(rate_type_id))

    async def _clear_defaults(self, warehouse_id: uuid.UUID, keep_id: uuid.UUID | None = None) -> None:
        query = (
            update(RateType)
            .where(RateType.warehouse_id == warehouse_id, RateType.is_default.is_(True))
            .values(is_default=False, updated_at=now_ms())
        )
        if keep_id is not None:
            query = query.where(RateType.id != keep_id)
        await self.session.execute(query)

    async def create(self, rate_type: RateType) -> RateType:
        if rate_type.is_default:
            await self._clear_defaults(rate_type.warehouse_id)
        self.session.add(rate_type)
        await self.session.commit()
        await self.session.refresh(rate_type)
        return rate_type

    async def update(self, rate_type: RateType) -> RateType:
        if rate_type.is_default:
            await self._clear_defaults(rate_type.warehouse_id, keep_id=rate_type.id)
        self.session.add(rate_type)
        await self.session.commit()
        await self.session.refresh(rate_type)
        return rate_type

    async def delete(self, rate_type: RateType) -> None:
        await self.session.execute(delete(RateBracket).where(RateBracket.rate_type_id == rate_type.id))
        await self.session.delete(rate_type)
        await self.session.commit()


class RateBracketRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(self, rate_type_id: str | uuid.UUID) -> list[RateBracket]:
        result = await self.session.execute(
            select(RateBracket).where(RateBracket.rate_type_id == _uuid(rate_type_id)).order_by(RateBracket.cbm)
        )
        return list(result.scalars().all())

    async def get(self, bracket_id: str | uuid.UUID) -> RateBracket | None:
        return await self.session.get(RateBracket, _uuid(bracket_id))

    async def create_bulk(self, brackets: list[RateBracket]) -> list[RateBracket]:
        self.session.add_all(brackets)
        await self.session.commit()
        for bracket in brackets:
            await self.session.refresh(bracket)
        return brackets

    async def update(self, bracket: RateBracket) -> RateBracket:
        self.session.add(bracket)
        await self.session.commit()
        await self.session.refresh(bracket)
        return bracket

    async def delete(self, bracket: RateBracket) -> None:
        await self.session.delete(bracket)
        await self.session.commit()

    async def delete_all(self, rate_type_id: str | uuid.UUID) -> int:
        result = await self.session.execute(delete(RateBracket).where(RateBracket.rate_type_id == _uuid(rate_type_id)))
        await self.session.commit()
        return result.rowcount or 0
