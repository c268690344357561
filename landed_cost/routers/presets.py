from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException, status

from landed_cost.core.deps import get_db_session
from landed_cost.repositories.preset_repo import PresetRepository
from landed_cost.schemas.preset import PresetCreate, PresetList, PresetRead, PresetUpdate
from landed_cost.services.presets import CapacityExceeded, PresetManager, PresetNotFound

router = APIRouter(prefix="/presets", tags=["presets"])


def _manager(session) -> PresetManager:
    return PresetManager(PresetRepository(session))


@router.get("", response_model=PresetList)
async def list_presets(session=Depends(get_db_session)):
    return PresetList(presets=await _manager(session).list())


@router.get("/default", response_model=PresetRead | None)
async def get_default_preset(session=Depends(get_db_session)):
    return await _manager(session).get_default()


@router.post("", response_model=PresetRead, status_code=status.HTTP_201_CREATED)
async def create_preset(payload: PresetCreate, session=Depends(get_db_session)):
    try:
        return await _manager(session).create(payload.name, payload.slots)
    except CapacityExceeded as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/{preset_id}", response_model=PresetRead)
async def get_preset(preset_id: uuid.UUID, session=Depends(get_db_session)):
    try:
        return await _manager(session).get(preset_id)
    except PresetNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")


@router.patch("/{preset_id}", response_model=PresetRead)
async def update_preset(preset_id: uuid.UUID, payload: PresetUpdate, session=Depends(get_db_session)):
    try:
        return await _manager(session).update(preset_id, payload.changes())
    except PresetNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")


@router.delete("/{preset_id}")
async def delete_preset(preset_id: uuid.UUID, session=Depends(get_db_session)):
    try:
        await _manager(session).remove(preset_id)
    except PresetNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")
    return {"status": "ok"}


@router.post("/{preset_id}/default", response_model=PresetRead)
async def set_default_preset(preset_id: uuid.UUID, session=Depends(get_db_session)):
    try:
        return await _manager(session).set_default(preset_id)
    except PresetNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")


@router.delete("/{preset_id}/default", response_model=PresetRead)
async def clear_default_preset(preset_id: uuid.UUID, session=Depends(get_db_session)):
    try:
        return await _manager(session).clear_default(preset_id)
    except PresetNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")
