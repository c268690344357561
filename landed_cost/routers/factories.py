from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException, status

from landed_cost.core.deps import get_db_session
from landed_cost.models.factory import Factory, FactoryCostItem
from landed_cost.repositories.factory_repo import FactoryCostItemRepository, FactoryRepository
from landed_cost.schemas.factory import (
    CostItemCreate,
    CostItemRead,
    CostItemUpdate,
    FactoryCreate,
    FactoryRead,
    FactoryUpdate,
)

router = APIRouter(prefix="/factories", tags=["factories"])


async def _get_factory(repo: FactoryRepository, factory_id: uuid.UUID) -> Factory:
    factory = await repo.get(factory_id)
    if not factory:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Factory not found")
    return factory


async def _get_item(repo: FactoryCostItemRepository, factory_id: uuid.UUID, item_id: uuid.UUID) -> FactoryCostItem:
    item = await repo.get(item_id)
    if not item or item.factory_id != factory_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cost item not found")
    return item


@router.get("", response_model=list[FactoryRead])
async def list_factories(active_only: bool = True, session=Depends(get_db_session)):
    return await FactoryRepository(session).list(active_only=active_only)


@router.post("", response_model=FactoryRead, status_code=status.HTTP_201_CREATED)
async def create_factory(payload: FactoryCreate, session=Depends(get_db_session)):
    return await FactoryRepository(session).create(Factory(**payload.model_dump()))


@router.get("/{factory_id}", response_model=FactoryRead)
async def get_factory(factory_id: uuid.UUID, session=Depends(get_db_session)):
    return await _get_factory(FactoryRepository(session), factory_id)


@router.patch("/{factory_id}", response_model=FactoryRead)
async def update_factory(factory_id: uuid.UUID, payload: FactoryUpdate, session=Depends(get_db_session)):
    repo = FactoryRepository(session)
    factory = await _get_factory(repo, factory_id)
    for key, value in payload.changes().items():
        setattr(factory, key, value)
    return await repo.update(factory)


@router.delete("/{factory_id}")
async def delete_factory(factory_id: uuid.UUID, hard: bool = False, session=Depends(get_db_session)):
    repo = FactoryRepository(session)
    factory = await _get_factory(repo, factory_id)
    if hard:
        await repo.delete(factory)
    else:
        await repo.soft_delete(factory)
    return {"status": "ok"}


@router.get("/{factory_id}/items", response_model=list[CostItemRead])
async def list_cost_items(factory_id: uuid.UUID, active_only: bool = True, session=Depends(get_db_session)):
    await _get_factory(FactoryRepository(session), factory_id)
    return await FactoryCostItemRepository(session).list(factory_id, active_only=active_only)


@router.post("/{factory_id}/items", response_model=CostItemRead, status_code=status.HTTP_201_CREATED)
async def create_cost_item(factory_id: uuid.UUID, payload: CostItemCreate, session=Depends(get_db_session)):
    factory = await _get_factory(FactoryRepository(session), factory_id)
    item = FactoryCostItem(factory_id=factory.id, **payload.model_dump())
    return await FactoryCostItemRepository(session).create(item)


@router.patch("/{factory_id}/items/{item_id}", response_model=CostItemRead)
async def update_cost_item(
    factory_id: uuid.UUID,
    item_id: uuid.UUID,
    payload: CostItemUpdate,
    session=Depends(get_db_session),
):
    repo = FactoryCostItemRepository(session)
    item = await _get_item(repo, factory_id, item_id)
    for key, value in payload.changes().items():
        setattr(item, key, value)
    return await repo.update(item)


@router.delete("/{factory_id}/items/{item_id}")
async def delete_cost_item(
    factory_id: uuid.UUID,
    item_id: uuid.UUID,
    hard: bool = False,
    session=Depends(get_db_session),
):
    repo = FactoryCostItemRepository(session)
    item = await _get_item(repo, factory_id, item_id)
    if hard:
        await repo.delete(item)
    else:
        await repo.soft_delete(item)
    return {"status": "ok"}
