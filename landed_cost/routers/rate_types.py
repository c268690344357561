from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from landed_cost.core.deps import get_db_session
from landed_cost.models.rate_type import RateBracket, RateType
from landed_cost.repositories.shipping_repo import RateBracketRepository, RateTypeRepository, WarehouseRepository
from landed_cost.schemas.shipping import (
    BracketBulkCreate,
    BracketRead,
    BracketUpdate,
    RateTypeCreate,
    RateTypeRead,
    RateTypeUpdate,
)

router = APIRouter(prefix="/rate-types", tags=["shipping"])


async def _get_rate_type(repo: RateTypeRepository, rate_type_id: uuid.UUID) -> RateType:
    rate_type = await repo.get(rate_type_id)
    if not rate_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rate type not found")
    return rate_type


@router.get("", response_model=list[RateTypeRead])
async def list_rate_types(warehouse_id: uuid.UUID, session=Depends(get_db_session)):
    return await RateTypeRepository(session).list(warehouse_id)


@router.post("", response_model=RateTypeRead, status_code=status.HTTP_201_CREATED)
async def create_rate_type(payload: RateTypeCreate, session=Depends(get_db_session)):
    warehouse = await WarehouseRepository(session).get(payload.warehouse_id)
    if not warehouse:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Warehouse not found")
    rate_type = RateType(company_id=warehouse.company_id, **payload.model_dump())
    return await RateTypeRepository(session).create(rate_type)


@router.patch("/{rate_type_id}", response_model=RateTypeRead)
async def update_rate_type(rate_type_id: uuid.UUID, payload: RateTypeUpdate, session=Depends(get_db_session)):
    repo = RateTypeRepository(session)
    rate_type = await _get_rate_type(repo, rate_type_id)
    for key, value in payload.changes().items():
        setattr(rate_type, key, value)
    return await repo.update(rate_type)


@router.delete("/{rate_type_id}")
async def delete_rate_type(rate_type_id: uuid.UUID, session=Depends(get_db_session)):
    repo = RateTypeRepository(session)
    rate_type = await _get_rate_type(repo, rate_type_id)
    await repo.delete(rate_type)
    return {"status": "ok"}


@router.get("/{rate_type_id}/brackets", response_model=list[BracketRead])
async def list_brackets(rate_type_id: uuid.UUID, session=Depends(get_db_session)):
    await _get_rate_type(RateTypeRepository(session), rate_type_id)
    return await RateBracketRepository(session).list(rate_type_id)


@router.post("/{rate_type_id}/brackets", response_model=list[BracketRead], status_code=status.HTTP_201_CREATED)
async def create_brackets(rate_type_id: uuid.UUID, payload: BracketBulkCreate, session=Depends(get_db_session)):
    rate_type = await _get_rate_type(RateTypeRepository(session), rate_type_id)
    bounds = [bracket.cbm for bracket in payload.brackets]
    if len(set(bounds)) != len(bounds):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate bracket upper bounds")

    repo = RateBracketRepository(session)
    if payload.replace:
        await repo.delete_all(rate_type.id)
    brackets = [
        RateBracket(rate_type_id=rate_type.id, cbm=bracket.cbm, unit_price=bracket.unit_price)
        for bracket in payload.brackets
    ]
    try:
        return await repo.create_bulk(brackets)
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Bracket upper bound already exists")


@router.patch("/{rate_type_id}/brackets/{bracket_id}", response_model=BracketRead)
async def update_bracket(
    rate_type_id: uuid.UUID,
    bracket_id: uuid.UUID,
    payload: BracketUpdate,
    session=Depends(get_db_session),
):
    repo = RateBracketRepository(session)
    bracket = await repo.get(bracket_id)
    if not bracket or bracket.rate_type_id != rate_type_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bracket not found")
    for key, value in payload.changes().items():
        setattr(bracket, key, value)
    try:
        return await repo.update(bracket)
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Bracket upper bound already exists")


@router.delete("/{rate_type_id}/brackets/{bracket_id}")
async def delete_bracket(rate_type_id: uuid.UUID, bracket_id: uuid.UUID, session=Depends(get_db_session)):
    repo = RateBracketRepository(session)
    bracket = await repo.get(bracket_id)
    if not bracket or bracket.rate_type_id != rate_type_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bracket not found")
    await repo.delete(bracket)
    return {"status": "ok"}
