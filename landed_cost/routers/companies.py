from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException, status

from landed_cost.core.deps import get_db_session
from landed_cost.models.company_cost import CompanyCostItem
from landed_cost.models.shipping_company import ShippingCompany
from landed_cost.models.warehouse import Warehouse
from landed_cost.repositories.cost_repo import CompanyCostItemRepository
from landed_cost.repositories.shipping_repo import ShippingCompanyRepository, WarehouseRepository
from landed_cost.schemas.cost import (
    CompanyCostItemBulkCreate,
    CompanyCostItemCreate,
    CompanyCostItemRead,
    CompanyCostItemUpdate,
)
from landed_cost.schemas.shipping import (
    CompanyCreate,
    CompanyRead,
    CompanyUpdate,
    WarehouseCreate,
    WarehouseRead,
    WarehouseUpdate,
)

router = APIRouter(prefix="/companies", tags=["shipping"])
warehouse_router = APIRouter(prefix="/warehouses", tags=["shipping"])


@router.get("", response_model=list[CompanyRead])
async def list_companies(active_only: bool = True, session=Depends(get_db_session)):
    return await ShippingCompanyRepository(session).list(active_only=active_only)


@router.post("", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
async def create_company(payload: CompanyCreate, session=Depends(get_db_session)):
    repo = ShippingCompanyRepository(session)
    return await repo.create(ShippingCompany(**payload.model_dump()))


@router.get("/{company_id}", response_model=CompanyRead)
async def get_company(company_id: uuid.UUID, session=Depends(get_db_session)):
    company = await ShippingCompanyRepository(session).get(company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipping company not found")
    return company


@router.patch("/{company_id}", response_model=CompanyRead)
async def update_company(company_id: uuid.UUID, payload: CompanyUpdate, session=Depends(get_db_session)):
    repo = ShippingCompanyRepository(session)
    company = await repo.get(company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipping company not found")
    for key, value in payload.changes().items():
        setattr(company, key, value)
    return await repo.update(company)


@router.delete("/{company_id}")
async def delete_company(company_id: uuid.UUID, hard: bool = False, session=Depends(get_db_session)):
    repo = ShippingCompanyRepository(session)
    company = await repo.get(company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipping company not found")
    if hard:
        await repo.delete(company)
    else:
        await repo.soft_delete(company)
    return {"status": "ok"}


@warehouse_router.get("", response_model=list[WarehouseRead])
async def list_warehouses(
    company_id: uuid.UUID | None = None,
    active_only: bool = True,
    session=Depends(get_db_session),
):
    return await WarehouseRepository(session).list(company_id, active_only=active_only)


@warehouse_router.post("", response_model=WarehouseRead, status_code=status.HTTP_201_CREATED)
async def create_warehouse(payload: WarehouseCreate, session=Depends(get_db_session)):
    company = await ShippingCompanyRepository(session).get(payload.company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipping company not found")
    return await WarehouseRepository(session).create(Warehouse(**payload.model_dump()))


@warehouse_router.patch("/{warehouse_id}", response_model=WarehouseRead)
async def update_warehouse(warehouse_id: uuid.UUID, payload: WarehouseUpdate, session=Depends(get_db_session)):
    repo = WarehouseRepository(session)
    warehouse = await repo.get(warehouse_id)
    if not warehouse:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Warehouse not found")
    for key, value in payload.changes().items():
        setattr(warehouse, key, value)
    return await repo.update(warehouse)


@warehouse_router.delete("/{warehouse_id}")
async def delete_warehouse(warehouse_id: uuid.UUID, hard: bool = False, session=Depends(get_db_session)):
    repo = WarehouseRepository(session)
    warehouse = await repo.get(warehouse_id)
    if not warehouse:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Warehouse not found")
    if hard:
        await repo.delete(warehouse)
    else:
        await repo.soft_delete(warehouse)
    return {"status": "ok"}


async def _get_company(session, company_id: uuid.UUID) -> ShippingCompany:
    company = await ShippingCompanyRepository(session).get(company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipping company not found")
    return company


async def _get_cost_item(repo: CompanyCostItemRepository, company_id: uuid.UUID, item_id: uuid.UUID) -> CompanyCostItem:
    item = await repo.get(item_id)
    if not item or item.company_id != company_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company cost item not found")
    return item


@router.get("/{company_id}/cost-items", response_model=list[CompanyCostItemRead])
async def list_company_cost_items(company_id: uuid.UUID, session=Depends(get_db_session)):
    await _get_company(session, company_id)
    return await CompanyCostItemRepository(session).list(company_id)


@router.post("/{company_id}/cost-items", response_model=CompanyCostItemRead, status_code=status.HTTP_201_CREATED)
async def create_company_cost_item(
    company_id: uuid.UUID,
    payload: CompanyCostItemCreate,
    session=Depends(get_db_session),
):
    company = await _get_company(session, company_id)
    item = CompanyCostItem(company_id=company.id, **payload.model_dump())
    return await CompanyCostItemRepository(session).create(item)


@router.post(
    "/{company_id}/cost-items/bulk",
    response_model=list[CompanyCostItemRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_company_cost_items(
    company_id: uuid.UUID,
    payload: CompanyCostItemBulkCreate,
    session=Depends(get_db_session),
):
    company = await _get_company(session, company_id)
    repo = CompanyCostItemRepository(session)
    if payload.replace:
        await repo.delete_all(company.id)
    items = [CompanyCostItem(company_id=company.id, **item.model_dump()) for item in payload.items]
    return await repo.create_bulk(items)


@router.patch("/{company_id}/cost-items/{item_id}", response_model=CompanyCostItemRead)
async def update_company_cost_item(
    company_id: uuid.UUID,
    item_id: uuid.UUID,
    payload: CompanyCostItemUpdate,
    session=Depends(get_db_session),
):
    repo = CompanyCostItemRepository(session)
    item = await _get_cost_item(repo, company_id, item_id)
    for key, value in payload.changes().items():
        setattr(item, key, value)
    return await repo.update(item)


@router.delete("/{company_id}/cost-items/{item_id}")
async def delete_company_cost_item(company_id: uuid.UUID, item_id: uuid.UUID, session=Depends(get_db_session)):
    repo = CompanyCostItemRepository(session)
    item = await _get_cost_item(repo, company_id, item_id)
    await repo.delete(item)
    return {"status": "ok"}
